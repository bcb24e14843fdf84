import pytest

from iotkit.config import Configuration
from iotkit.memory import (
    MemoryPool,
    StringCopier,
    StringMover,
    add_padding,
    is_aligned,
)
from iotkit.strings import JsonString, Ownership


@pytest.mark.parametrize("size", [0, 1, 7, 8, 9, 100])
@pytest.mark.parametrize("pointer_size", [1, 2, 4, 8])
def test_add_padding_invariants(size, pointer_size):
    padded = add_padding(size, pointer_size)
    assert padded % pointer_size == 0
    assert size <= padded < size + pointer_size
    assert is_aligned(padded, pointer_size)


def test_add_padding_keeps_aligned_values():
    assert add_padding(16, 8) == 16
    assert add_padding(0) == 0


def test_add_padding_rejects_bad_pointer_size():
    with pytest.raises(ValueError):
        add_padding(5, 3)


def test_is_aligned_false_for_odd_value():
    assert not is_aligned(5, 4)


def test_new_pool_is_empty():
    pool = MemoryPool(64)
    assert pool.capacity == 64
    assert pool.size == 0
    assert not pool.overflowed
    assert pool.get_free_zone() == (0, 64)


def test_save_string_writes_terminator():
    pool = MemoryPool(64)
    offset = pool.save_string("hello")
    assert offset == 0
    assert pool.buffer[: len("hello") + 1] == b"hello\0"
    assert pool.size == len("hello") + 1


def test_save_string_deduplicates():
    pool = MemoryPool(64)
    first = pool.save_string("hello")
    used = pool.size
    second = pool.save_string(b"hello")
    assert second == first
    assert pool.size == used


def test_save_string_finds_later_strings():
    pool = MemoryPool(64)
    pool.save_string("ab")
    second = pool.save_string("cd")
    assert pool.save_string("cd") == second


def test_save_string_without_deduplication():
    pool = MemoryPool(64, Configuration(enable_string_deduplication=False))
    first = pool.save_string("hello")
    second = pool.save_string("hello")
    assert first != second
    assert pool.size == 2 * (len("hello") + 1)


def test_save_null_string():
    pool = MemoryPool(64)
    assert pool.save_string(None) is None
    assert pool.size == 0


def test_save_string_overflow_and_clear():
    pool = MemoryPool(4)
    assert pool.save_string("hello") is None
    assert pool.overflowed
    pool.clear()
    assert not pool.overflowed
    assert pool.size == 0


def test_alloc_variant_from_the_right():
    pool = MemoryPool(32)
    assert pool.alloc_variant(16) == 32 - 16
    assert pool.alloc_variant(16) == 0
    assert pool.size == 32
    assert pool.alloc_variant(16) is None
    assert pool.overflowed


def test_strings_and_slots_share_space():
    pool = MemoryPool(16)
    pool.alloc_variant(8)
    assert pool.can_alloc(8)
    assert not pool.can_alloc(9)
    assert pool.save_string("12345678") is None
    assert pool.save_string("1234567") == 0


def test_free_zone_after_string():
    pool = MemoryPool(64)
    pool.save_string("ab")
    used = len("ab") + 1
    assert pool.get_free_zone() == (used, 64 - used)


def test_squash_shrinks_pool():
    pool = MemoryPool(64)
    pool.save_string("abc")
    pool.alloc_variant(16)
    used = pool.size
    reclaimed = pool.squash()
    assert reclaimed > 0
    assert pool.capacity == 64 - reclaimed
    assert pool.capacity == add_padding(len("abc") + 1) + 16
    assert pool.size == used
    assert pool.buffer.startswith(b"abc\0")
    assert pool.squash() == 0


def test_save_from_free_zone_without_room():
    pool = MemoryPool(4)
    with pytest.raises(ValueError):
        pool.save_string_from_free_zone(4)


def test_copier_builds_and_saves():
    pool = MemoryPool(64)
    copier = StringCopier(pool)
    copier.start_string()
    copier.append("hel")
    copier.append(b"lo")
    assert copier.str() == JsonString("hello")
    saved = copier.save()
    assert saved == JsonString("hello")
    assert saved.ownership is Ownership.COPIED
    assert copier.is_valid()
    assert pool.size == len("hello") + 1


def test_copier_deduplicates_with_pool():
    pool = MemoryPool(64)
    pool.save_string("key")
    used = pool.size
    copier = StringCopier(pool)
    copier.start_string()
    copier.append("key")
    assert copier.save() == JsonString("key")
    assert pool.size == used


def test_copier_overflow():
    pool = MemoryPool(4)
    copier = StringCopier(pool)
    copier.start_string()
    copier.append("hello")
    assert not copier.is_valid()
    assert copier.size == pool.capacity - 1


def test_copier_on_full_pool_marks_overflow():
    pool = MemoryPool(8)
    pool.alloc_variant(8)
    copier = StringCopier(pool)
    copier.start_string()
    assert pool.overflowed
    with pytest.raises(RuntimeError):
        copier.save()


def test_copier_requires_start():
    copier = StringCopier(MemoryPool(8))
    with pytest.raises(RuntimeError):
        copier.append("x")


def test_mover_writes_in_place():
    buf = bytearray(b"hello world")
    mover = StringMover(buf)
    mover.start_string()
    mover.append("hel")
    first = mover.save()
    assert first == JsonString("hel")
    assert first.is_linked
    assert buf[:4] == b"hel\0"
    mover.start_string()
    mover.append(b"xy")
    assert mover.size == 2
    assert mover.save() == JsonString("xy")
    assert buf[4:7] == b"xy\0"
    assert mover.is_valid()


def test_mover_rejects_overrun():
    mover = StringMover(bytearray(b"ab"))
    mover.start_string()
    with pytest.raises(IndexError):
        mover.append("abc")
    mover.append("ab")
    with pytest.raises(IndexError):
        mover.save()