import sys
from typing import Any


def printf(format: str, *args: Any):
    print(format.format(*args), end="")


def printf_err(format: str, *args: Any):
    print(format.format(*args), end="", file=sys.stderr)


def key_text(key: Any, ksize: int) -> str:
    """Printable form of the first `ksize` bytes of a key."""
    data = bytes(memoryview(key).cast("B")[:ksize])
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.hex()
