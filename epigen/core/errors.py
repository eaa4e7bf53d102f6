class EpiGenError(Exception):
    """Base class for every error raised by the decision tree services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EpiGenError, ValueError):
    """Missing, blank or malformed input."""

    status_code = 400


class NotFound(EpiGenError, LookupError):
    """A referenced tree, node or edge does not exist."""

    status_code = 404


class InvalidState(EpiGenError):
    """The operation is structurally impossible on the current tree."""

    status_code = 409


class ConcurrentModificationError(EpiGenError):
    """The tree changed between the snapshot and the commit."""

    status_code = 409

    def __init__(self, tree_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Tree {tree_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
        self.tree_id = tree_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class GenerationError(EpiGenError):
    """The generation backend failed: credentials, transport or response format."""

    status_code = 502
    retryable = False

    def __init__(self, message: str, status: int = None, body: str = None):
        super().__init__(message)
        self.status = status
        self.body = body


class MalformedDraftError(GenerationError):
    """The generated text is not a valid draft."""


class GenerationTimeoutError(GenerationError):
    status_code = 504
    retryable = True
