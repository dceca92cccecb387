"""Error types raised across the bench. Both are ValueErrors."""


class InvalidParameter(ValueError):
    """A generation, reference, sweep or config parameter is out of range."""


class EmptySignalSet(ValueError):
    """The evaluator was handed zero signals."""
