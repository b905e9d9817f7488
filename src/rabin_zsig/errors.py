class RabinError(RuntimeError):
    """Base class for every failure raised by the signing pipeline."""


class EntropyError(RabinError):
    """The randomness source returned fewer bytes than requested."""


class InvariantViolation(RabinError):
    """A value that must be a square (or a postcondition) does not hold."""


class PreconditionError(RabinError, ValueError):
    """A caller supplied parameters the pipeline cannot work with."""
