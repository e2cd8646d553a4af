# errors.py
# Error taxonomy shared by the classifier client, the resolver and the entry store.


class MoodEngineError(Exception):
    """Base class for everything raised by the mood backend."""


class ClassificationUnavailable(MoodEngineError):
    """Classifier did not answer, or answered with a non-success status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ClassificationFormatError(MoodEngineError):
    """Classifier answered, but not with a list of label/score pairs."""


class StoreFailure(MoodEngineError):
    """A persist/query/update/delete against the entry store failed."""

    def __init__(self, operation: str, cause: Exception = None):
        super().__init__(f"Entry store {operation} failed")
        self.operation = operation
        self.cause = cause
