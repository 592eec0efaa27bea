"""Tests for buffer zeroization."""

import pytest

from secretsmanager.core.memory import is_zeroed, secure_zero, zeroize


def test_secure_zero_bytearray():
    buf = bytearray(b"derived-key-material")
    secure_zero(buf)
    assert is_zeroed(buf)
    assert len(buf) == 20


def test_secure_zero_memoryview():
    buf = bytearray(b"abcdef")
    secure_zero(memoryview(buf)[2:4])
    assert buf == bytearray(b"ab\x00\x00ef")


def test_secure_zero_empty():
    buf = bytearray()
    secure_zero(buf)
    assert is_zeroed(buf)


def test_context_wipes_on_exit():
    first, second = bytearray(b"one"), bytearray(b"two")
    with zeroize(first, second):
        assert first == bytearray(b"one")
    assert is_zeroed(first)
    assert is_zeroed(second)


def test_context_wipes_on_error():
    buf = bytearray(b"secret")
    with pytest.raises(RuntimeError):
        with zeroize(buf):
            raise RuntimeError("boom")
    assert is_zeroed(buf)


def test_zeroize_yields_nothing():
    buf = bytearray(b"k")
    with zeroize(buf) as result:
        assert result is None
    assert is_zeroed(buf)
