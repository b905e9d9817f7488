import gmpy2
import structlog

from rabin_zsig.errors import InvariantViolation
from rabin_zsig.utils import to_hex

log = structlog.get_logger()


def compress_signature(s: gmpy2.mpz, n: gmpy2.mpz) -> gmpy2.mpz:
    """Compress a Rabin signature (Bleichenbacher, "Compressing Rabin Signatures").

    Expands s / n as a continued fraction and returns the last convergent
    denominator below isqrt(n). For that denominator z, s * z is congruent
    mod n to a value smaller than sqrt(n), so z * z * e mod n is a perfect
    square.

    The convergents live in a 4-slot ring indexed mod 4. The loop tests the
    newest slot against the root and returns the slot before it.
    """
    s, n = gmpy2.mpz(s), gmpy2.mpz(n)
    root = gmpy2.isqrt(n)
    vs = [gmpy2.mpz(0), gmpy2.mpz(1), gmpy2.mpz(0), gmpy2.mpz(0)]

    i = 1
    while True:
        i = (i + 1) & 3

        if i & 1:
            if n == 0:
                raise InvariantViolation("continued fraction ended early; signature shares a factor with n")
            cf, s = gmpy2.f_divmod(s, n)
        else:
            if s == 0:
                raise InvariantViolation("continued fraction ended early; signature shares a factor with n")
            cf, n = gmpy2.f_divmod(n, s)

        vs[i] = vs[(i - 1) & 3] * cf + vs[(i - 2) & 3]
        if vs[i] >= root:
            break

    zsig = vs[(i - 1) & 3]
    log.info("compressed signature", zsig=to_hex(zsig), bits=zsig.bit_length())
    return zsig
