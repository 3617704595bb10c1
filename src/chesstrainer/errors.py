"""Errors raised while importing puzzles and assembling training sets."""
from chesstrainer.config import MAX_SET_NAME_LENGTH, MAX_SET_SIZE, MIN_SET_SIZE


class PuzzleImportError(ValueError):
    """A dataset row could not be imported."""


class PuzzleParseError(PuzzleImportError):
    """A dataset row has a missing or malformed field."""


class PuzzleValidationError(PuzzleImportError):
    """A parsed puzzle breaks a domain rule."""


class CreateTrainingSetError(Exception):
    """Base class for training set creation failures."""
    kind: str = "CreateTrainingSetError"
    message: str = "Training set could not be created."

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class EmptyName(CreateTrainingSetError):
    kind = "EmptyName"
    message = "Set name can't be blank."


class NameLengthLimitExceeded(CreateTrainingSetError):
    kind = "NameLengthLimitExceeded"
    message = f"Set name length can't exceed {MAX_SET_NAME_LENGTH}."


class SizeTooSmall(CreateTrainingSetError):
    kind = "SizeTooSmall"
    message = f"Set size must be at least {MIN_SET_SIZE}."


class SizeLimitExceeded(CreateTrainingSetError):
    kind = "SizeLimitExceeded"
    message = f"Set size can't exceed {MAX_SET_SIZE}."


class CriteriaUnmet(CreateTrainingSetError):
    kind = "CriteriaUnmet"
    message = "Not enough puzzles meet the criteria given."


class RepositoryError(CreateTrainingSetError):
    """A store call failed. The underlying exception is kept as ``cause``."""
    kind = "RepositoryError"
    message = "Repository error."

    def __init__(self, cause: Exception):
        super().__init__()
        self.cause = cause
