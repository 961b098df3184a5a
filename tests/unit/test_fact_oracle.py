"""
Module 06 - Fact Oracle Unit Tests
Tests for oracle/fact_oracle.py
"""
import pytest

from core.schemas.errors import ErrorCodes, InvalidArgumentException
from oracle.fact_oracle import DEFAULT_MAX_INDEX, MIN_INDEX, FactOracle, PrimeOracle, nth_prime


FIRST_PRIMES = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47]


class TestNthPrime:
    """Tests for nth_prime()."""

    @pytest.mark.parametrize("n,expected", list(enumerate(FIRST_PRIMES, start=1)))
    def test_first_primes(self, n, expected):
        assert nth_prime(n) == expected

    @pytest.mark.parametrize(
        "n,expected",
        [(100, 541), (1000, 7919), (10000, 104729)],
    )
    def test_larger_indices(self, n, expected):
        assert nth_prime(n) == expected

    def test_non_positive_raises(self):
        with pytest.raises(ValueError):
            nth_prime(0)


class TestPrimeOracle:
    """Tests for PrimeOracle.query()."""

    def test_tenth_prime(self):
        assert PrimeOracle().query(10) == 29

    def test_smallest_index(self):
        assert PrimeOracle().query(MIN_INDEX) == 3

    def test_deterministic(self):
        oracle = PrimeOracle()

        assert oracle.query(100) == oracle.query(100) == 541

    @pytest.mark.parametrize("index", [1, 0, -1, -100])
    def test_out_of_domain(self, index):
        with pytest.raises(InvalidArgumentException) as exc_info:
            PrimeOracle().query(index)

        assert exc_info.value.code == ErrorCodes.INVALID_ARGUMENT
        assert exc_info.value.message == "N must be greater than one."
        assert exc_info.value.details["index"] == index

    @pytest.mark.parametrize("index", ["10", 10.0, True, None])
    def test_non_integer_rejected(self, index):
        with pytest.raises(InvalidArgumentException):
            PrimeOracle().query(index)

    def test_max_index_enforced(self):
        oracle = PrimeOracle(max_index=50)

        assert oracle.query(50) == 229
        with pytest.raises(InvalidArgumentException, match="must not exceed 50"):
            oracle.query(51)

    def test_default_ceiling(self):
        oracle = PrimeOracle()

        assert oracle.max_index == DEFAULT_MAX_INDEX
        with pytest.raises(InvalidArgumentException) as exc_info:
            oracle.query(10**15)
        assert exc_info.value.details["index"] == 10**15

    def test_default_ceiling_applies_to_subclasses(self):
        with pytest.raises(InvalidArgumentException):
            TestCustomFactOracle.Squares().query(DEFAULT_MAX_INDEX + 1)

    def test_max_index_below_domain_raises(self):
        with pytest.raises(ValueError):
            PrimeOracle(max_index=1)


class TestCustomFactOracle:
    """The query contract holds for any FactOracle subclass."""

    class Squares(FactOracle):
        name = "squares"

        def _compute(self, index: int) -> int:
            return index * index

    def test_domain_checks_apply(self):
        oracle = self.Squares()

        assert oracle.query(12) == 144
        with pytest.raises(InvalidArgumentException):
            oracle.query(1)
