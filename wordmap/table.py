from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from .config import DEFAULT_CONFIG, TableConfig, Word, as_word
from .hashing import DEFAULT_HASH, HashFn
from .shared import printf


_debug_trace_table = False


def set_debug_trace_table(b: bool):
    global _debug_trace_table
    _debug_trace_table = b


# callback(key, ksize, value, usr), used for iteration and eviction
EntryCallback = Callable[[Any, int, Word, Any], None]


class TableError(Exception):
    pass


class TableFreedError(TableError):
    pass


class TableBusyError(TableError):
    pass


@dataclass
class Entry:
    key: Any = None
    ksize: int = 0
    hash: int = 0
    value: Word = 0
    # slot index of the next entry in insertion order
    next: int | None = None

    def is_empty(self) -> bool:
        return self.key is None


def _new_buckets(capacity: int) -> list[Entry]:
    return [Entry() for _ in range(capacity)]


@dataclass
class Table:
    """Open-addressing table of byte keys to machine words.

    Keys are held by reference and never copied, so the caller must keep a
    key alive (and unchanged) for as long as it is in the table. Entries are
    visited in insertion order, which is kept as a list threaded through the
    slots by index.
    """

    config: TableConfig = DEFAULT_CONFIG
    hash_fn: HashFn = DEFAULT_HASH
    count: int = 0
    buckets: list[Entry] = field(default_factory=list)
    first: int | None = None
    last: int | None = None
    freed: bool = False
    busy: int = 0

    def __post_init__(self):
        if not self.buckets:
            self.buckets = _new_buckets(self.config.initial_capacity)

    @property
    def capacity(self) -> int:
        return len(self.buckets)

    def __len__(self) -> int:
        return self.size()

    def size(self) -> int:
        return self.count

    def set(self, key: Any, value: Word, ksize: int | None = None):
        ksize, value = self._prepare_insert(key, ksize, value)

        hash = self.hash_fn(key, ksize)
        index = self.find_entry(key, ksize, hash)
        entry = self.buckets[index]
        if entry.is_empty():
            self._link(index, key, ksize, hash)
        entry.value = value

    def get_or_insert(
        self, key: Any, value: Word, ksize: int | None = None
    ) -> tuple[bool, Word]:
        """Insert `value` if `key` is absent, otherwise fetch the stored value.

        Returns (existed, value): (False, value) after a fresh insert, and
        (True, stored) with the entry left untouched when the key was present.
        """
        ksize, value = self._prepare_insert(key, ksize, value)

        hash = self.hash_fn(key, ksize)
        index = self.find_entry(key, ksize, hash)
        entry = self.buckets[index]
        if entry.is_empty():
            self._link(index, key, ksize, hash)
            entry.value = value
            return False, value

        return True, entry.value

    def set_with_eviction(
        self,
        key: Any,
        value: Word,
        callback: EntryCallback,
        usr: Any = None,
        ksize: int | None = None,
    ):
        """Like `set`, but hand the replaced key and value to `callback`.

        The callback runs before the slot is overwritten and receives the old
        key reference, so it is free to release it. Unlike `set`, the stored
        key reference is replaced by `key`.
        """
        ksize, value = self._prepare_insert(key, ksize, value)

        hash = self.hash_fn(key, ksize)
        index = self.find_entry(key, ksize, hash)
        entry = self.buckets[index]
        if entry.is_empty():
            self._link(index, key, ksize, hash)
            entry.value = value
            return

        self.busy += 1
        try:
            callback(entry.key, ksize, entry.value, usr)
        finally:
            self.busy -= 1

        # ksize and hash are unchanged, the keys compared equal
        entry.key = key
        entry.value = value

    def get(self, key: Any, ksize: int | None = None) -> tuple[bool, Word]:
        self._check_alive()
        ksize = _key_size(key, ksize)

        hash = self.hash_fn(key, ksize)
        entry = self.buckets[self.find_entry(key, ksize, hash)]
        if entry.is_empty():
            return False, 0
        return True, entry.value

    def entries(self) -> Iterator[tuple[Any, int, Word]]:
        self._check_alive()
        buckets = self.buckets
        count = self.count
        index = self.first
        while index is not None:
            self._check_alive()
            if self.buckets is not buckets or self.count != count:
                raise TableBusyError("table changed size during iteration")
            entry = buckets[index]
            yield entry.key, entry.ksize, entry.value
            index = entry.next

    def iterate(self, callback: EntryCallback, usr: Any = None):
        """Call `callback(key, ksize, value, usr)` for every entry in insertion order.

        This is the place to release keys and values before `free_table`.
        The table cannot be modified from inside the callback.
        """
        self._check_alive()
        self.busy += 1
        try:
            for key, ksize, value in self.entries():
                callback(key, ksize, value, usr)
        finally:
            self.busy -= 1

    def find_entry(self, key: Any, ksize: int, hash: int) -> int:
        """Return the slot index holding `key`, or the empty slot where it belongs."""
        capacity = self.capacity
        index = hash % capacity
        data = None

        while True:
            entry = self.buckets[index]
            if entry.is_empty():
                return index

            # compare sizes, then hashes, then key data as a last resort
            if entry.ksize == ksize and entry.hash == hash:
                if data is None:
                    data = memoryview(key).cast("B")[:ksize]
                if memoryview(entry.key).cast("B")[:ksize] == data:
                    return index

            index = (index + 1) % capacity

    def _prepare_insert(self, key: Any, ksize: int | None, value: Word) -> tuple[int, Word]:
        self._check_alive()
        if self.busy:
            raise TableBusyError("table modified from inside a callback")

        ksize = _key_size(key, ksize)
        value = as_word(value)

        # grow before probing, growth moves the slot the key lands in
        if not self.config.fits(self.count + 1, self.capacity):
            self._resize()
        return ksize, value

    def _link(self, index: int, key: Any, ksize: int, hash: int):
        entry = self.buckets[index]
        entry.key = key
        entry.ksize = ksize
        entry.hash = hash
        entry.next = None

        if self.last is None:
            self.first = index
        else:
            self.buckets[self.last].next = index
        self.last = index
        self.count += 1

    def _resize(self):
        old_capacity = self.capacity
        capacity = old_capacity
        while not self.config.fits(self.count + 1, capacity):
            capacity = self.config.grown(capacity)

        old_buckets = self.buckets
        buckets = _new_buckets(capacity)

        first: int | None = None
        last: int | None = None
        index = self.first
        while index is not None:
            old_entry = old_buckets[index]
            dest = resize_entry(buckets, old_entry)

            if last is None:
                first = dest
            else:
                buckets[last].next = dest
            last = dest
            index = old_entry.next

        # old slots stay in place until migration is complete
        self.buckets = buckets
        self.first = first
        self.last = last

        if _debug_trace_table:
            printf(
                "== resize {0:d} -> {1:d} ({2:d} entries) ==\n",
                old_capacity,
                capacity,
                self.count,
            )

    def _check_alive(self):
        if self.freed:
            raise TableFreedError("table was freed")


def resize_entry(buckets: list[Entry], old_entry: Entry) -> int:
    """Place a migrated entry into `buckets` using its cached hash."""
    capacity = len(buckets)
    index = old_entry.hash % capacity
    while True:
        entry = buckets[index]
        if entry.is_empty():
            entry.key = old_entry.key
            entry.ksize = old_entry.ksize
            entry.hash = old_entry.hash
            entry.value = old_entry.value
            entry.next = None
            return index

        index = (index + 1) % capacity


def _key_size(key: Any, ksize: int | None) -> int:
    try:
        length = memoryview(key).nbytes
    except TypeError:
        raise TypeError("key must be bytes-like", key) from None

    if ksize is None:
        return length
    if not 0 <= ksize <= length:
        raise ValueError(f"ksize must be in 0..{length}", ksize)
    return ksize


def create_table(config: TableConfig | None = None, hash_fn: HashFn | None = None) -> Table:
    return Table(
        config=config if config is not None else DEFAULT_CONFIG,
        hash_fn=hash_fn if hash_fn is not None else DEFAULT_HASH,
    )


def free_table(table: Table):
    """Release the slots. Keys and values the entries refer to are left alone."""
    if table.busy:
        raise TableBusyError("table freed from inside a callback")
    table.buckets = []
    table.count = 0
    table.first = None
    table.last = None
    table.freed = True


def str_key(text: str) -> bytes:
    return text.encode("utf-8")
