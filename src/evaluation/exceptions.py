"""Exceptions raised by the evaluation harness."""

from typing import Iterable, Optional


class EvaluationError(Exception):
    """Base class for evaluation failures."""


class ConfigurationError(EvaluationError, ValueError):
    """Invalid fold count, dataset, or target column."""


class UnknownMetricError(EvaluationError, KeyError):
    """One or more requested metric names are not implemented.

    Attributes:
        names: The unrecognized metric names.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self.names = list(names)
        super().__init__(self.names)

    def __str__(self) -> str:
        return f"Unknown metric(s): {', '.join(self.names)}"


class FoldTrainingError(EvaluationError, RuntimeError):
    """A model family failed on one fold's training subset.

    Attributes:
        fold: 1-based index of the failing fold.
        cause: The underlying exception, if any.
    """

    def __init__(self, fold: int, cause: Optional[BaseException] = None) -> None:
        self.fold = fold
        self.cause = cause
        # args mirror __init__ so the error survives pickling across workers
        super().__init__(fold, cause)

    def __str__(self) -> str:
        message = f"Training failed on fold {self.fold}"
        if self.cause is not None:
            message += f": {type(self.cause).__name__}: {self.cause}"
        return message
