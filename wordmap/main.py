import sys

from .config import format_word
from .debug import dump_table
from .shared import key_text, printf, printf_err
from .table import Table, create_table, free_table


def count_symbols(table: Table, source: bytes):
    for symbol in source.split():
        existed, count = table.get_or_insert(symbol, 1)
        if existed:
            table.set(symbol, count + 1)


def print_counts(table: Table):
    table.iterate(
        lambda key, ksize, value, usr: printf(
            "{0:>7s} {1:s}\n", format_word(value), key_text(key, ksize)
        )
    )


def run(source: bytes, dump: bool):
    table = create_table()
    count_symbols(table, source)
    if dump:
        dump_table(table, "symbols")
    print_counts(table)
    free_table(table)


def main():
    args = sys.argv[1:]
    dump = "-d" in args
    args = [arg for arg in args if arg != "-d"]

    if len(args) > 1:
        printf_err("Usage: wordmap [-d] [path]\n")
        sys.exit(64)

    if len(args) == 0:
        run(sys.stdin.buffer.read(), dump)
        return

    try:
        with open(args[0], "rb") as fp:
            source = fp.read()
    except OSError:
        printf_err("Could not open file \"{0:s}\".\n", args[0])
        sys.exit(66)
    run(source, dump)
