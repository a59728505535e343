"""Exception types raised by the WLE pipeline.

Every error here is fatal for a run: the pipeline stops and surfaces it.
"""


class SchemaMismatchError(ValueError):
    """A table lacks columns the pipeline selected or expects."""

    def __init__(self, message: str, missing_columns=None):
        super().__init__(message)
        self.missing_columns = list(missing_columns or [])


class DegenerateCleaningError(ValueError):
    """Cleaning removed the outcome column or left no feature columns."""


class ExternalCapabilityError(RuntimeError):
    """The underlying learning library failed to fit, score or predict."""


__all__ = ["SchemaMismatchError", "DegenerateCleaningError", "ExternalCapabilityError"]
