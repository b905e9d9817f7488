"""Quadratic residue test and the element tweak that makes e a square mod n.

With p = 3 (mod 8) and q = 7 (mod 8), -1 is a non-residue modulo both
primes and 2 is a non-residue modulo p only. Negating e flips both residue
bits, doubling it flips exactly one, so one of the four tweak combinations
always lands e on a square mod n.
"""
from dataclasses import dataclass
from typing import Tuple

import gmpy2
import structlog

from rabin_zsig.algorithm.group import Group
from rabin_zsig.errors import InvariantViolation
from rabin_zsig.utils import to_hex

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class ResidueState:
    a: bool  # square mod p
    b: bool  # square mod q

    @property
    def is_square(self) -> bool:
        return self.a and self.b

    def __str__(self) -> str:
        return f"[{int(self.a)}, {int(self.b)}]"


@dataclass(frozen=True, slots=True)
class Tweak:
    mul_2: bool = False
    negate: bool = False

    @property
    def applied(self) -> bool:
        return self.mul_2 or self.negate


def is_quadratic_residue(e: gmpy2.mpz, p: gmpy2.mpz, power: gmpy2.mpz) -> bool:
    """Return True iff ``e`` is a square mod ``p``, where ``power == (p + 1) / 4``.

    Only valid for p = 3 (mod 4): there ``e ** power`` is a square root of
    ``e`` whenever one exists, so squaring it back is a constructive test.
    """
    r = gmpy2.powmod(e, power, p)
    return (r * r) % p == e % p


def residue_state(e: gmpy2.mpz, group: Group) -> ResidueState:
    return ResidueState(
        a=is_quadratic_residue(e, group.p, group.p_power),
        b=is_quadratic_residue(e, group.q, group.q_power),
    )


def apply_tweak(e: gmpy2.mpz, tweak: Tweak, n: gmpy2.mpz) -> gmpy2.mpz:
    if tweak.negate:
        e = -e
    if tweak.mul_2:
        e = e * 2
    if tweak.applied:
        e = e % n
    return e


def plan_tweak(e: gmpy2.mpz, group: Group) -> Tweak:
    """Choose the doubling / negation needed to make ``e`` a square mod n.

    The residue bits are recomputed after doubling rather than assumed, so
    the plan does not depend on which prime 2 is a non-residue for.
    """
    state = residue_state(e, group)
    mul_2 = False
    if state.a != state.b:
        mul_2 = True
        state = residue_state(apply_tweak(e, Tweak(mul_2=True), group.n), group)

    negate = not state.is_square
    return Tweak(mul_2=mul_2, negate=negate)


def tweak_element(e: gmpy2.mpz, group: Group) -> Tuple[gmpy2.mpz, ResidueState, Tweak]:
    """Tweak ``e`` into a square mod n.

    Returns the tweaked element together with the residue state of the
    original element and the tweak that was applied.
    """
    state = residue_state(e, group)
    log.info("residue state", state=str(state))

    tweak = plan_tweak(e, group)
    log.info("tweaks", mul_2=int(tweak.mul_2), negate=int(tweak.negate))

    tweaked = apply_tweak(e, tweak, group.n)
    after = residue_state(tweaked, group)
    if not after.is_square:
        raise InvariantViolation(
            f"tweaked element is not a square mod n (state {after}, tweak {tweak})"
        )

    log.info("tweaked element", e=to_hex(tweaked))
    return tweaked, state, tweak
