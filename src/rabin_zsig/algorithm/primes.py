"""Random primes with a fixed residue mod 8, and random group elements."""
import gmpy2
import structlog

from rabin_zsig.entropy import RandomSource
from rabin_zsig.errors import PreconditionError

log = structlog.get_logger()

MAX_SAMPLE_BYTES = 2048
PRIMALITY_ROUNDS = 10


def sample_width(size: int, max_bytes: int = MAX_SAMPLE_BYTES) -> int:
    """Number of bytes to draw for a ``size``-bit value."""
    n_bytes = size >> 3
    if n_bytes < 1:
        raise PreconditionError(f"size must be at least 8 bits, got {size}")
    if n_bytes > max_bytes:
        raise PreconditionError(f"size of {size} bits exceeds the {max_bytes}-byte sampling limit")
    return n_bytes


def random_prime(
    source: RandomSource,
    size: int,
    mod8: int,
    *,
    max_bytes: int = MAX_SAMPLE_BYTES,
) -> gmpy2.mpz:
    """Draw a probable prime of about ``size`` bits with ``p % 8 == mod8``.

    Every failed candidate is discarded and a completely fresh one is read
    from ``source``; there is no incremental search.
    """
    if mod8 not in (1, 3, 5, 7):
        raise PreconditionError(f"mod8 must be an odd residue in 0..7, got {mod8}")
    n_bytes = sample_width(size, max_bytes)

    attempts = 0
    while True:
        attempts += 1
        candidate = gmpy2.mpz(int.from_bytes(source.read(n_bytes), "big"))
        candidate = gmpy2.bit_set(candidate, 0)
        candidate = gmpy2.bit_set(candidate, 1) if mod8 & 2 else gmpy2.bit_clear(candidate, 1)
        candidate = gmpy2.bit_set(candidate, 2) if mod8 & 4 else gmpy2.bit_clear(candidate, 2)

        if gmpy2.is_prime(candidate, PRIMALITY_ROUNDS):
            log.debug("prime found", bits=candidate.bit_length(), mod8=mod8, attempts=attempts)
            return candidate


def random_element(
    source: RandomSource,
    size: int,
    n: gmpy2.mpz,
    *,
    max_bytes: int = MAX_SAMPLE_BYTES,
) -> gmpy2.mpz:
    """Import ``size`` random bits and reduce them mod ``n``."""
    n_bytes = sample_width(size, max_bytes)
    return gmpy2.mpz(int.from_bytes(source.read(n_bytes), "big")) % n
