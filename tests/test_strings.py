import pytest

from iotkit.strings import (
    AdaptedString,
    JsonString,
    Ownership,
    StoragePolicy,
    adapt_string,
    string_compare,
    string_equals,
)


def test_json_string_from_text():
    s = JsonString("hello")
    assert s.size == len("hello")
    assert s.data == b"hello"
    assert s.is_linked
    assert str(s) == "hello"


def test_json_string_copied_is_not_linked():
    s = JsonString("hello", ownership=Ownership.COPIED)
    assert not s.is_linked
    assert s.ownership is Ownership.COPIED


def test_json_string_stops_at_nul_without_size():
    s = JsonString(b"ab\0cd")
    assert s.size == 2
    assert s.data == b"ab"


def test_json_string_explicit_size():
    assert JsonString(b"abcdef", 3) == JsonString("abc")


def test_json_string_size_too_large():
    with pytest.raises(ValueError):
        JsonString(b"abc", 5)


def test_null_json_string():
    s = JsonString()
    assert not s
    assert s.is_null
    assert s == JsonString()
    assert not (s == JsonString(""))


def test_json_string_equality_ignores_ownership():
    assert JsonString("x", ownership=Ownership.COPIED) == JsonString("x")
    assert hash(JsonString("x", ownership=Ownership.COPIED)) == hash(JsonString("x"))


def test_json_string_different_sizes_differ():
    assert not (JsonString("abc") == JsonString("ab"))


def test_adapt_str_is_sized_copy():
    a = adapt_string("hello")
    assert a.policy is StoragePolicy.COPY
    assert not a.zero_terminated
    assert a.data == b"hello"
    assert len(a) == len("hello")


def test_adapt_bytes_is_linked_zero_terminated():
    a = adapt_string(b"key\0rest")
    assert a.policy is StoragePolicy.LINK
    assert a.zero_terminated
    assert a.data == b"key"


def test_adapt_bytearray_is_copied():
    a = adapt_string(bytearray(b"key"))
    assert a.policy is StoragePolicy.COPY
    assert a.zero_terminated


@pytest.mark.parametrize(
    "ownership, policy",
    [(Ownership.LINKED, StoragePolicy.LINK), (Ownership.COPIED, StoragePolicy.COPY)],
)
def test_adapt_json_string_follows_ownership(ownership, policy):
    a = adapt_string(JsonString("abc", ownership=ownership))
    assert a.policy is policy
    assert a.data == b"abc"


def test_adapt_with_size_truncates():
    a = adapt_string(b"abcdef", 2)
    assert a.data == b"ab"
    assert a.policy is StoragePolicy.COPY
    assert not a.zero_terminated


def test_adapt_with_size_too_large():
    with pytest.raises(ValueError):
        adapt_string("ab", 5)


def test_adapt_none_is_null():
    assert adapt_string(None).is_null


def test_adapt_unsupported_type():
    with pytest.raises(TypeError):
        adapt_string(42)


def test_adapt_returns_adapted_unchanged():
    a = AdaptedString(b"x", 1, StoragePolicy.COPY)
    assert adapt_string(a) is a


def test_compare_ordering():
    assert string_compare("abc", "abd") < 0
    assert string_compare("abd", "abc") > 0
    assert string_compare("abc", "abc") == 0


def test_compare_prefix_is_smaller():
    assert string_compare("ab", "abc") < 0
    assert string_compare(b"abc", b"ab") > 0


@pytest.mark.parametrize("a, b", [("a", "b"), ("zz", "z"), (b"q", "q"), ("k", b"kk")])
def test_compare_is_antisymmetric(a, b):
    left = string_compare(a, b)
    right = string_compare(b, a)
    assert (left > 0) == (right < 0)
    assert (left == 0) == (right == 0)


def test_compare_signed_for_sized_strings():
    high = adapt_string(b"\x80", 1)
    assert string_compare(high, "a") < 0


def test_compare_unsigned_for_zero_terminated_pair():
    assert string_compare(b"\x80", b"a") > 0


def test_compare_null_raises():
    with pytest.raises(ValueError):
        string_compare(None, "a")


def test_equals():
    assert string_equals("abc", b"abc")
    assert string_equals(JsonString("abc"), bytearray(b"abc"))
    assert not string_equals("abc", "abd")
    assert not string_equals("abc", "ab")


def test_equals_null_raises():
    with pytest.raises(ValueError):
        string_equals("a", JsonString())