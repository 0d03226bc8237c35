import io
import sys

import pytest

from wordmap.config import format_hex_word
from wordmap.debug import dump_table
from wordmap.main import main
from wordmap.table import create_table


def test_counts_in_first_seen_order(tmp_path, monkeypatch, capsys):
    path = tmp_path / "symbols.txt"
    path.write_bytes(b"b a b\nc b\n")
    monkeypatch.setattr(sys, "argv", ["wordmap", str(path)])

    main()

    assert capsys.readouterr().out == "      3 b\n      1 a\n      1 c\n"


def test_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["wordmap"])
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"x y x")))

    main()

    assert capsys.readouterr().out == "      2 x\n      1 y\n"


def test_dump(tmp_path, monkeypatch, capsys):
    path = tmp_path / "symbols.txt"
    path.write_bytes(b"b a b c b")
    monkeypatch.setattr(sys, "argv", ["wordmap", "-d", str(path)])

    main()

    out = capsys.readouterr().out
    # the fifth lookup sees 3 entries and grows the table
    assert out.startswith("== symbols (3/10) ==\n")
    assert out.count(" ----\n") == 7
    assert out.endswith("      3 b\n      1 a\n      1 c\n")


def test_missing_file(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["wordmap", str(tmp_path / "nope")])

    with pytest.raises(SystemExit) as e:
        main()
    assert e.value.code == 66
    assert "Could not open file" in capsys.readouterr().err


def test_usage(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["wordmap", "a", "b"])

    with pytest.raises(SystemExit) as e:
        main()
    assert e.value.code == 64
    assert capsys.readouterr().err == "Usage: wordmap [-d] [path]\n"


def test_dump_table_collisions(capsys):
    t = create_table(hash_fn=lambda key, ksize: 1)
    t.set(b"one", 1)
    t.set(b"two", -2)

    dump_table(t, "t")

    assert capsys.readouterr().out == (
        "== t (2/5) ==\n"
        "0000 ----\n"
        "0001 00000001 'one' 1 0x1\n"
        f"0002 00000001 'two' -2 0x{format_hex_word(-2)} +1\n"
        "0003 ----\n"
        "0004 ----\n"
        "order: 1 2\n"
    )


def test_repeated_dump_flag(tmp_path, monkeypatch, capsys):
    path = tmp_path / "symbols.txt"
    path.write_bytes(b"x")
    monkeypatch.setattr(sys, "argv", ["wordmap", "-d", "-d", str(path)])

    main()

    out = capsys.readouterr().out
    assert out.startswith("== symbols (1/5) ==\n")
    assert out.endswith("      1 x\n")


def test_unreadable_path(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["wordmap", str(tmp_path)])

    with pytest.raises(SystemExit) as e:
        main()
    assert e.value.code == 66
    assert "Could not open file" in capsys.readouterr().err
