from typing import Union

import gmpy2

IntLike = Union[int, gmpy2.mpz]


def to_hex(value: IntLike) -> str:
    """Lowercase hex digits without a prefix; negative values keep their sign."""
    return gmpy2.digits(gmpy2.mpz(value), 16)


def from_hex(text: str) -> gmpy2.mpz:
    """Parse a hex string, tolerating a ``0x`` prefix, whitespace and colons."""
    cleaned = "".join(text.split()).replace(":", "")
    if cleaned.lower().startswith("0x"):
        cleaned = cleaned[2:]
    if not cleaned:
        raise ValueError("empty hex value")
    try:
        return gmpy2.mpz(cleaned, 16)
    except ValueError as e:
        raise ValueError(f"Invalid hex value: {text!r}") from e


def seed_from_hex(text: str) -> bytes:
    """Decode a ``--seed`` argument."""
    seed = bytes.fromhex("".join(text.split()))
    if not seed:
        raise ValueError("seed must not be empty")
    return seed
