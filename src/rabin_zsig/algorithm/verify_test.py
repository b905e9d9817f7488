import time

import gmpy2
import pytest

from rabin_zsig.algorithm.verify import (
    BenchmarkResult,
    benchmark_verification,
    is_valid_compressed,
    verify_compressed,
)
from rabin_zsig.errors import InvariantViolation
from rabin_zsig.models import ScenarioConfig
from rabin_zsig.pipeline import run_scenario
from rabin_zsig.entropy import SeededRandomSource

# zsig = 5 compresses s = 100 mod 253, e = 100 ** 2 mod 253 = 133
N = gmpy2.mpz(253)
E = gmpy2.mpz(133)
ZSIG = gmpy2.mpz(5)


@pytest.fixture(scope="module")
def scenario():
    config = ScenarioConfig(prime_bits=512, element_bits=1024, iterations=10)
    return run_scenario(SeededRandomSource(b"verify-scenario"), config)


class TestVerifyCompressed:
    """Test suite for verify_compressed"""

    def test_valid_returns_root(self):
        """Test valid returns root"""
        assert verify_compressed(ZSIG, E, N) == 6

    def test_not_square(self):
        """Test that a non-square product is rejected"""
        # 36 * 133 = 234 (mod 253), between 15 ** 2 and 16 ** 2
        with pytest.raises(InvariantViolation, match="not a perfect square"):
            verify_compressed(gmpy2.mpz(6), E, N)

    def test_zero_product(self):
        """Test that a zero product is rejected"""
        with pytest.raises(InvariantViolation, match="zero"):
            verify_compressed(gmpy2.mpz(0), E, N)
        with pytest.raises(InvariantViolation, match="zero"):
            verify_compressed(ZSIG, gmpy2.mpz(0), N)

    def test_is_valid_compressed(self):
        """Test is valid compressed"""
        assert is_valid_compressed(ZSIG, E, N)
        assert not is_valid_compressed(gmpy2.mpz(6), E, N)

    def test_pipeline_output_verifies(self, scenario):
        """Test pipeline output verifies"""
        root = verify_compressed(scenario.zsig, scenario.tweaked_element, scenario.n)
        assert root > 0
        assert root * root == (scenario.zsig ** 2 * scenario.tweaked_element) % scenario.n

    @pytest.mark.parametrize("delta", [-1, 1])
    def test_off_by_one_zsig_fails(self, scenario, delta):
        """Test off by one zsig fails"""
        corrupted = scenario.zsig + delta
        with pytest.raises(InvariantViolation):
            verify_compressed(corrupted, scenario.tweaked_element, scenario.n)
        assert not is_valid_compressed(corrupted, scenario.tweaked_element, scenario.n)

    def test_wrong_element_fails(self, scenario):
        """Test wrong element fails"""
        assert not is_valid_compressed(scenario.zsig, scenario.tweaked_element + 1, scenario.n)


class TestBenchmarkVerification:
    """Test suite for benchmark_verification"""

    def test_progress_chunks(self):
        """Test progress chunks"""
        seen = []
        result = benchmark_verification(ZSIG, E, N, 1000, on_progress=seen.append, progress_every=300)
        assert seen == [300, 600, 900, 1000]
        assert isinstance(result, BenchmarkResult)
        assert result.iterations == 1000
        assert result.root == 6
        assert result.elapsed_seconds >= 0

    def test_deterministic_root(self, scenario):
        """Test deterministic root"""
        first = benchmark_verification(scenario.zsig, scenario.tweaked_element, scenario.n, 2000)
        second = benchmark_verification(scenario.zsig, scenario.tweaked_element, scenario.n, 2000)
        assert first.root == second.root

    def test_progress_callback_not_timed(self):
        """Test that time spent in the progress callback is excluded from elapsed_seconds"""
        result = benchmark_verification(ZSIG, E, N, 10, on_progress=lambda done: time.sleep(0.2), progress_every=5)
        assert result.elapsed_seconds < 0.1

    def test_invalid_input_fails_before_loop(self):
        """Test invalid input fails before loop"""
        calls = []
        with pytest.raises(InvariantViolation):
            benchmark_verification(gmpy2.mpz(6), E, N, 10, on_progress=calls.append)
        assert calls == []

    def test_iterations_must_be_positive(self):
        """Test iterations must be positive"""
        with pytest.raises(ValueError, match="iterations"):
            benchmark_verification(ZSIG, E, N, 0)

    def test_per_verification_us(self):
        """Test per verification us"""
        result = BenchmarkResult(iterations=1_000_000, elapsed_seconds=2.0, root=gmpy2.mpz(1))
        assert result.per_verification_us == pytest.approx(2.0)
