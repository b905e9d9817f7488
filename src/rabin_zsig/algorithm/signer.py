import gmpy2
import structlog

from rabin_zsig.algorithm.group import Group
from rabin_zsig.algorithm.residue import residue_state
from rabin_zsig.entropy import RandomSource
from rabin_zsig.errors import InvariantViolation
from rabin_zsig.utils import to_hex

log = structlog.get_logger()


def random_root_index(source: RandomSource) -> int:
    """Pick one of the four square roots: bit 0 flips the root mod p, bit 1 mod q."""
    return source.read(1)[0] & 3


def sign(e: gmpy2.mpz, group: Group, root_index: int = 0) -> gmpy2.mpz:
    """Rabin signature: a square root of the (already tweaked) element mod n."""
    if not 0 <= root_index <= 3:
        raise ValueError(f"root_index must be in 0..3, got {root_index}")
    if not residue_state(e, group).is_square:
        raise InvariantViolation("element has no square root mod n; tweak it first")

    proot = gmpy2.powmod(e, group.p_power, group.p)
    qroot = gmpy2.powmod(e, group.q_power, group.q)

    if root_index & 1:
        proot = -proot
    if root_index & 2:
        qroot = -qroot

    s = (proot * group.v + qroot * group.u) % group.n
    if (s * s) % group.n != e % group.n:
        raise InvariantViolation("signature does not square to the element")

    log.info("signed", root=root_index, sig=to_hex(s))
    return s
