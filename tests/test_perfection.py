"""
Unit tests for the trial-division perfection test.

Tests cover:
- Known perfect and non-perfect values
- Square-root divisors counted once
- Input range validation
"""
import math

import pytest

from perfect_search.perfection import divisor_sum, is_perfect, max_divisor


class TestIsPerfect:
    """Tests for is_perfect."""

    def test_six(self):
        assert is_perfect(6, 2)

    def test_twenty_eight(self):
        assert is_perfect(28, 5)

    def test_twelve_is_not_perfect(self):
        # 1 + 2 + 3 + 4 + 6 = 16
        assert not is_perfect(12, 3)

    def test_nine_is_not_perfect(self):
        # 1 + 3 = 4; the square root 3 must not be counted twice
        assert not is_perfect(9, 3)

    @pytest.mark.parametrize("value", [496, 8128, 33550336])
    def test_larger_perfect_numbers(self, value):
        assert is_perfect(value, max_divisor(value))

    def test_one_is_not_perfect(self):
        assert not is_perfect(1, 1)

    def test_prime_is_not_perfect(self):
        assert not is_perfect(7, max_divisor(7))


class TestDivisorSum:
    """Tests for divisor_sum."""

    def test_square_root_counted_once(self):
        assert divisor_sum(9, 3) == 4
        assert divisor_sum(16, 4) == 1 + 2 + 4 + 8
        assert divisor_sum(36, 6) == 1 + 2 + 3 + 4 + 6 + 9 + 12 + 18

    def test_matches_naive_sum(self):
        for n in range(2, 400):
            expected = sum(d for d in range(1, n) if n % d == 0)
            assert divisor_sum(n, math.isqrt(n)) == expected, f"mismatch for {n}"

    def test_large_power_of_two(self):
        # Proper divisors of 2^31 sum to 2^31 - 1
        value = 2 ** 31
        assert divisor_sum(value, max_divisor(value)) == value - 1

    def test_sum_beyond_32_bits(self):
        # Abundant value near the top of the range: sum exceeds 2^32
        value = 2 ** 32 - 2 ** 8
        assert divisor_sum(value, max_divisor(value)) > 2 ** 32


class TestValidation:
    """Tests for input range checks."""

    @pytest.mark.parametrize("value", [0, -6, 2 ** 32])
    def test_value_out_of_range(self, value):
        with pytest.raises(ValueError):
            is_perfect(value, 2)

    @pytest.mark.parametrize("bound", [0, 65536])
    def test_max_divisor_out_of_range(self, bound):
        with pytest.raises(ValueError):
            is_perfect(28, bound)

    def test_max_divisor_fits_16_bits(self):
        assert max_divisor(2 ** 32 - 1) == 65535
        assert max_divisor(28) == 5
