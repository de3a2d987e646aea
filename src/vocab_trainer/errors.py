"""Exception types raised by the vocab trainer core."""


class VocabTrainerError(Exception):
    """Base class for all vocab trainer errors."""


class CatalogError(VocabTrainerError):
    """A word catalog could not be loaded or is inconsistent."""


class InvalidTransitionError(VocabTrainerError):
    """An operation was attempted in a test state that does not allow it."""


class AnswerIndexError(VocabTrainerError, IndexError):
    """An answer was recorded for a question slot that does not exist."""
