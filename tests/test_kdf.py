"""Tests for password-based key derivation."""

import pytest
from argon2.exceptions import HashingError

from secretsmanager.core.crypto import kdf as kdf_module
from secretsmanager.core.crypto.kdf import KdfParams, derive_key, generate_salt
from secretsmanager.core.errors import InvalidSalt, KeyDerivationFailed
from secretsmanager.security.constants import KEY_LENGTH_BYTES, SALT_LENGTH_BYTES

FAST = KdfParams(iterations=100_000)
FAST_ARGON2 = KdfParams(algorithm="argon2id", time_cost=1, memory_cost=8192, parallelism=1)


class TestDeriveKey:

    def test_key_is_256_bits(self):
        key = derive_key("pw1", generate_salt(), FAST)
        assert isinstance(key, bytearray)
        assert len(key) == KEY_LENGTH_BYTES

    def test_deterministic_for_same_inputs(self):
        salt = generate_salt()
        assert derive_key("pw1", salt, FAST) == derive_key("pw1", salt, FAST)

    def test_str_and_utf8_bytes_agree(self):
        salt = generate_salt()
        assert derive_key("pässword", salt, FAST) == derive_key("pässword".encode("utf-8"), salt, FAST)

    def test_different_password_gives_different_key(self):
        salt = generate_salt()
        assert derive_key("pw1", salt, FAST) != derive_key("pw2", salt, FAST)

    def test_different_salt_gives_different_key(self):
        assert derive_key("pw1", generate_salt(), FAST) != derive_key("pw1", generate_salt(), FAST)

    def test_iteration_count_changes_key(self):
        salt = generate_salt()
        assert derive_key("pw1", salt, FAST) != derive_key("pw1", salt, KdfParams(iterations=100_001))

    @pytest.mark.parametrize("length", [0, 16, SALT_LENGTH_BYTES - 1, SALT_LENGTH_BYTES + 1])
    def test_wrong_salt_length_rejected(self, length):
        with pytest.raises(InvalidSalt):
            derive_key("pw1", b"\x00" * length, FAST)

    def test_argon2id(self):
        salt = generate_salt()
        key = derive_key("pw1", salt, FAST_ARGON2)
        assert len(key) == KEY_LENGTH_BYTES
        assert key == derive_key("pw1", salt, FAST_ARGON2)
        assert key != derive_key("pw1", salt, FAST)


class TestKdfParams:

    def test_defaults_meet_minimum(self):
        params = KdfParams()
        assert params.algorithm == "pbkdf2-sha256"
        assert params.iterations >= 100_000

    def test_too_few_iterations_rejected(self):
        with pytest.raises(ValueError, match="at least"):
            KdfParams(iterations=99_999)

    def test_unknown_algorithm_rejected(self):
        with pytest.raises(ValueError, match="Unsupported"):
            KdfParams(algorithm="md5")

    def test_argon2_memory_floor(self):
        with pytest.raises(ValueError):
            KdfParams(algorithm="argon2id", memory_cost=1024)

    def test_pbkdf2_dict_only_has_iterations(self):
        assert FAST.to_dict() == {"algorithm": "pbkdf2-sha256", "iterations": 100_000}
        assert KdfParams.from_dict(FAST.to_dict()) == FAST

    def test_argon2_dict(self):
        data = FAST_ARGON2.to_dict()
        assert data == {
            "algorithm": "argon2id",
            "time_cost": 1,
            "memory_cost": 8192,
            "parallelism": 1,
        }
        assert KdfParams.from_dict(data) == FAST_ARGON2

    @pytest.mark.parametrize("data", [
        {},
        {"algorithm": "scrypt", "iterations": 100_000},
        {"algorithm": "pbkdf2-sha256"},
        {"algorithm": "pbkdf2-sha256", "iterations": "100000"},
        {"algorithm": "pbkdf2-sha256", "iterations": True},
        {"algorithm": "pbkdf2-sha256", "iterations": 1000},
    ])
    def test_from_dict_rejects_bad_input(self, data):
        with pytest.raises(ValueError):
            KdfParams.from_dict(data)


def test_generate_salt_is_random_and_sized():
    salts = {generate_salt() for _ in range(10)}
    assert len(salts) == 10
    assert all(len(s) == SALT_LENGTH_BYTES for s in salts)


class TestCostLimits:

    @pytest.mark.parametrize("kwargs", [
        {"iterations": 10_000_001},
        {"algorithm": "argon2id", "time_cost": 0},
        {"algorithm": "argon2id", "time_cost": 17},
        {"algorithm": "argon2id", "parallelism": 0},
        {"algorithm": "argon2id", "parallelism": 2000, "memory_cost": 8192},
        {"algorithm": "argon2id", "memory_cost": 1_048_577},
    ])
    def test_out_of_range_rejected(self, kwargs):
        with pytest.raises(ValueError):
            KdfParams(**kwargs)

    def test_largest_parallelism_fits_memory_floor(self):
        params = KdfParams(algorithm="argon2id", parallelism=64, memory_cost=8192)
        assert params.memory_cost >= 8 * params.parallelism

    def test_backend_rejection_is_typed(self, monkeypatch):
        def reject(**kwargs):
            raise HashingError("Memory cost is too small")

        monkeypatch.setattr(kdf_module, "hash_secret_raw", reject)
        with pytest.raises(KeyDerivationFailed, match="Memory cost"):
            derive_key("pw1", generate_salt(), FAST_ARGON2)
