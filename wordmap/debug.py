from .config import format_hex_word, format_word
from .shared import key_text, printf
from .table import Table


def dump_table(table: Table, name: str):
    printf("== {0:s} ({1:d}/{2:d}) ==\n", name, table.count, table.capacity)

    for index in range(table.capacity):
        dump_entry(table, index)

    printf("order:")
    index = table.first
    while index is not None:
        printf(" {0:d}", index)
        index = table.buckets[index].next
    printf("\n")


def dump_entry(table: Table, index: int):
    entry = table.buckets[index]
    if entry.is_empty():
        printf("{0:04d} ----\n", index)
        return

    home = entry.hash % table.capacity
    printf(
        "{0:04d} {1:08x} {2!r} {3:s} 0x{4:s}",
        index,
        entry.hash,
        key_text(entry.key, entry.ksize),
        format_word(entry.value),
        format_hex_word(entry.value),
    )
    if home != index:
        # displaced by a collision, show the probe distance
        printf(" +{0:d}", (index - home) % table.capacity)
    printf("\n")
