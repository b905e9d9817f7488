from dataclasses import dataclass

import gmpy2

from rabin_zsig.algorithm.group import Group
from rabin_zsig.algorithm.residue import ResidueState, Tweak


@dataclass(frozen=True, slots=True)
class ScenarioResult:
    """Immutable record of every value produced by one signing run."""

    group: Group
    element: gmpy2.mpz
    residue_state: ResidueState
    tweak: Tweak
    tweaked_element: gmpy2.mpz
    root_index: int
    signature: gmpy2.mpz
    zsig: gmpy2.mpz

    @property
    def n(self) -> gmpy2.mpz:
        return self.group.n
