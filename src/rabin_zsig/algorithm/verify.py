import time
from dataclasses import dataclass
from typing import Callable, Optional

import gmpy2
import structlog

from rabin_zsig.errors import InvariantViolation

log = structlog.get_logger()

DEFAULT_ITERATIONS = 1_000_000

ProgressFn = Callable[[int], None]


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    iterations: int
    elapsed_seconds: float
    root: gmpy2.mpz

    @property
    def per_verification_us(self) -> float:
        return self.elapsed_seconds / self.iterations * 1e6


def verify_compressed(zsig: gmpy2.mpz, e: gmpy2.mpz, n: gmpy2.mpz) -> gmpy2.mpz:
    """Check that ``zsig**2 * e mod n`` is a non-zero perfect square.

    Returns the integer square root of the product.
    """
    t = (zsig * zsig * e) % n
    if t == 0:
        raise InvariantViolation("verification product is zero")

    root, rem = gmpy2.isqrt_rem(t)
    if rem:
        raise InvariantViolation("verification product is not a perfect square")
    return root


def is_valid_compressed(zsig: gmpy2.mpz, e: gmpy2.mpz, n: gmpy2.mpz) -> bool:
    try:
        verify_compressed(zsig, e, n)
    except InvariantViolation:
        return False
    return True


def benchmark_verification(
    zsig: gmpy2.mpz,
    e: gmpy2.mpz,
    n: gmpy2.mpz,
    iterations: int = DEFAULT_ITERATIONS,
    *,
    on_progress: Optional[ProgressFn] = None,
    progress_every: int = 50_000,
) -> BenchmarkResult:
    """Run the compressed-signature check ``iterations`` times and time it.

    ``on_progress`` receives the number of completed verifications after
    every ``progress_every`` iterations and once at the end. Time spent in the
    callback is not counted in ``elapsed_seconds``.
    """
    if iterations < 1:
        raise ValueError("iterations must be positive")
    if progress_every < 1:
        raise ValueError("progress_every must be positive")

    zsig, e, n = gmpy2.mpz(zsig), gmpy2.mpz(e), gmpy2.mpz(n)
    expected = verify_compressed(zsig, e, n)

    log.info("performing verifications", iterations=iterations)
    done = 0
    elapsed = 0.0
    while done < iterations:
        chunk = min(progress_every, iterations - done)
        start = time.perf_counter()
        for _ in range(chunk):
            if verify_compressed(zsig, e, n) != expected:
                raise InvariantViolation("verification is not deterministic")
        elapsed += time.perf_counter() - start
        done += chunk
        # Outside the timed region.
        if on_progress is not None:
            on_progress(done)

    result = BenchmarkResult(iterations=iterations, elapsed_seconds=elapsed, root=expected)
    log.info("verify time", seconds=round(elapsed, 6), per_verification_us=round(result.per_verification_us, 3))
    return result
