"""Tests for the cosmetic compatibility / online hash."""

import pytest

from app.utils.display_hash import (
    compute_compatibility,
    compute_online,
    pair_seed,
    string_hash,
)


class TestStringHash:
    def test_empty_seed_hashes_to_zero(self):
        assert string_hash("") == 0

    def test_matches_polynomial_formula(self):
        assert string_hash("a") == 97
        assert string_hash("ab") == 97 * 31 + 98
        assert string_hash("hello") == 99162322

    def test_wraps_to_signed_32_bits(self):
        # Well known seed whose 31-polynomial hash is exactly -2**31
        assert string_hash("polygenelubricants") == -(2**31)

    def test_hashes_utf16_code_units(self):
        # U+1F600 is the surrogate pair D83D DE00
        assert string_hash("\U0001F600") == 0xD83D * 31 + 0xDE00


class TestCompatibility:
    def test_same_seed_same_score(self):
        first = compute_compatibility("u1-u2")
        second = compute_compatibility("u1-u2")
        assert first == second

    def test_known_values(self):
        assert compute_compatibility("") == 70
        assert compute_compatibility("ab") == 75
        assert compute_compatibility("hello") == 88
        assert compute_compatibility("polygenelubricants") == 72

    @pytest.mark.parametrize(
        "seed",
        ["", " ", "u1-u2", "a" * 500, "Pengguna SoulMatch", "~!@#$%^&*()", "ünïcødé"],
    )
    def test_score_within_range(self, seed):
        assert 70 <= compute_compatibility(seed) <= 100

    def test_order_of_pair_matters_for_seed(self):
        assert pair_seed("u1", "u2") == "u1-u2"
        assert pair_seed("u2", "u1") == "u2-u1"


class TestOnline:
    def test_deterministic(self):
        assert compute_online("profile-42") == compute_online("profile-42")

    def test_known_values(self):
        assert compute_online("") is False
        assert compute_online("a") is True
        assert compute_online("polygenelubricants") is False
