from typing import Any, Callable
import zlib

from .config import WORD_BITS


HashFn = Callable[[Any, int], int]

HASH_INIT = 2166136261

_MASK_64 = (1 << 64) - 1
_BLOCK_MUL = 0xBF58476D1CE4E5B9
_TAIL_MUL = 0xD6E8FEB86659FD93


def key_bytes(key: Any, ksize: int) -> bytes:
    return bytes(memoryview(key).cast("B")[:ksize])


def hash_data_64(key: Any, ksize: int) -> int:
    data = key_bytes(key, ksize)
    hash = HASH_INIT

    nblocks = ksize // 8
    for i in range(nblocks):
        hash ^= int.from_bytes(data[i * 8 : i * 8 + 8], "little")
        hash = (hash * _BLOCK_MUL) & _MASK_64

    tail = data[nblocks * 8 :]
    if tail:
        # tail bytes sit above the low byte, which holds the key length
        last = (ksize & 0xFF) | (int.from_bytes(tail, "little") << 8)
        hash ^= last
        hash = (hash * _TAIL_MUL) & _MASK_64

    # fold to 32 bits, also serves as a finalizer
    return (hash ^ (hash >> 32)) & 0xFFFFFFFF


def hash_data_32(key: Any, ksize: int) -> int:
    # reflected CRC-32, polynomial 0xEDB88320
    return zlib.crc32(key_bytes(key, ksize)) & 0xFFFFFFFF


def hash_data_16(key: Any, ksize: int) -> int:
    # CRC-16/CCITT, polynomial 0x1021
    crc = 0xFFFF
    for b in key_bytes(key, ksize):
        x = (crc >> 8) ^ b
        x ^= x >> 4
        crc = ((crc << 8) ^ (x << 12) ^ (x << 5) ^ x) & 0xFFFF
    return crc


_HASHES: dict[int, HashFn] = {
    64: hash_data_64,
    32: hash_data_32,
    16: hash_data_16,
}


def select_hash(word_bits: int) -> HashFn:
    if word_bits not in _HASHES:
        raise ValueError("No hash function for word width", word_bits)
    return _HASHES[word_bits]


DEFAULT_HASH = select_hash(WORD_BITS)
