from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

BLUM_RESIDUES = (3, 7)


class ScenarioConfig(BaseModel):
    """Parameters of one keygen / sign / compress / benchmark run.

    Defaults are the reference scenario: two 512-bit primes with
    p = 3 (mod 8) and q = 7 (mod 8), a 1024-bit element and one million
    verifications.
    """

    model_config = ConfigDict(frozen=True)

    prime_bits: int = Field(default=512, ge=8)
    p_mod8: int = 3
    q_mod8: int = 7
    element_bits: int = Field(default=1024, ge=8)
    iterations: int = Field(default=1_000_000, ge=1)
    max_sample_bytes: int = Field(default=2048, ge=1)

    @field_validator("p_mod8", "q_mod8")
    @classmethod
    def residue_is_blum(cls, value: int) -> int:
        # 3 and 7 are the odd residues that are 3 mod 4.
        if value not in BLUM_RESIDUES:
            raise ValueError(f"residue mod 8 must be one of {BLUM_RESIDUES}, got {value}")
        return value

    @model_validator(mode="after")
    def check_layout(self) -> "ScenarioConfig":
        if self.p_mod8 == self.q_mod8:
            # 2 has to be a non-residue modulo exactly one of the primes.
            raise ValueError("p_mod8 and q_mod8 must differ")
        if self.element_bits < 2 * self.prime_bits:
            raise ValueError("element_bits must cover the modulus (at least 2 * prime_bits)")
        if self.element_bits // 8 > self.max_sample_bytes:
            raise ValueError("element_bits exceeds max_sample_bytes")
        return self
