from dataclasses import dataclass

import gmpy2
import structlog

from rabin_zsig.algorithm.primes import MAX_SAMPLE_BYTES, random_prime
from rabin_zsig.entropy import RandomSource
from rabin_zsig.errors import PreconditionError
from rabin_zsig.utils import to_hex

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class Group:
    """Blum modulus n = p * q with its CRT idempotents.

    ``u`` is 0 mod p and 1 mod q, ``v`` is 1 mod p and 0 mod q, and
    ``u + v == 1``.
    """

    p: gmpy2.mpz
    q: gmpy2.mpz
    n: gmpy2.mpz
    u: gmpy2.mpz
    v: gmpy2.mpz

    @property
    def p_power(self) -> gmpy2.mpz:
        """(p + 1) / 4, the square-root exponent mod p."""
        return (self.p + 1) >> 2

    @property
    def q_power(self) -> gmpy2.mpz:
        return (self.q + 1) >> 2


def build_group(p: gmpy2.mpz, q: gmpy2.mpz) -> Group:
    p, q = gmpy2.mpz(p), gmpy2.mpz(q)
    if p == q:
        raise PreconditionError("p and q must be distinct primes")

    g, u0, v0 = gmpy2.gcdext(p, q)
    if g != 1:
        raise PreconditionError(f"p and q are not coprime (gcd {g})")

    return Group(p=p, q=q, n=p * q, u=u0 * p, v=v0 * q)


def generate_group(
    source: RandomSource,
    bits: int = 512,
    p_mod8: int = 3,
    q_mod8: int = 7,
    *,
    max_bytes: int = MAX_SAMPLE_BYTES,
) -> Group:
    """Draw p, then q, from ``source`` and build the group."""
    p = random_prime(source, bits, p_mod8, max_bytes=max_bytes)
    log.info("generated prime", name="p", value=to_hex(p))
    q = random_prime(source, bits, q_mod8, max_bytes=max_bytes)
    log.info("generated prime", name="q", value=to_hex(q))

    group = build_group(p, q)
    log.info("built group", n=to_hex(group.n), u=to_hex(group.u), v=to_hex(group.v))
    return group
