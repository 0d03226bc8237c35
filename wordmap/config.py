from dataclasses import dataclass
import math
import struct


# native pointer width, the equivalent of sizing a word by UINTPTR_MAX
WORD_BITS = struct.calcsize("P") * 8

if WORD_BITS not in (16, 32, 64):
    raise ImportError(f"Unsupported pointer size: {WORD_BITS} bits")

WORD_MASK = (1 << WORD_BITS) - 1
WORD_MIN = -(1 << (WORD_BITS - 1))

Word = int


DEFAULT_CAPACITY = 5
DEFAULT_MAX_LOAD = 0.75
DEFAULT_GROWTH_FACTOR = 2


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class TableConfig:
    initial_capacity: int = DEFAULT_CAPACITY
    max_load_factor: float = DEFAULT_MAX_LOAD
    growth_factor: float = DEFAULT_GROWTH_FACTOR

    def __post_init__(self):
        if (
            isinstance(self.initial_capacity, bool)
            or not isinstance(self.initial_capacity, int)
            or self.initial_capacity < 1
        ):
            raise ConfigError("initial_capacity must be a positive int", self.initial_capacity)
        # a load factor of 1 or more would let the table fill up and probing never stop
        if not 0 < self.max_load_factor < 1:
            raise ConfigError("max_load_factor must be in (0, 1)", self.max_load_factor)
        if not math.isfinite(self.growth_factor) or self.growth_factor <= 1:
            raise ConfigError("growth_factor must be greater than 1", self.growth_factor)

    def grown(self, capacity: int) -> int:
        return max(capacity + 1, int(capacity * self.growth_factor))

    def fits(self, count: int, capacity: int) -> bool:
        return count <= self.max_load_factor * capacity


DEFAULT_CONFIG = TableConfig()


def as_word(value: Word) -> Word:
    """Normalise a signed or unsigned int to the unsigned word stored in a slot.

    Negative values wrap the way a cast to uintptr_t would, anything that does
    not fit in WORD_BITS raises OverflowError.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("word value must be int", value)
    if not WORD_MIN <= value <= WORD_MASK:
        raise OverflowError(f"value does not fit in {WORD_BITS} bits", value)
    return value & WORD_MASK


def to_signed(word: Word) -> int:
    word = as_word(word)
    if word > WORD_MASK >> 1:
        return word - (1 << WORD_BITS)
    return word


def format_word(word: Word) -> str:
    return "{0:d}".format(to_signed(word))


def format_hex_word(word: Word) -> str:
    return "{0:X}".format(as_word(word))
