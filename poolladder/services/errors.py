class LadderError(Exception):
    """Base class for validation and state errors raised by the ladder store."""

    code = "ladder_error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(LadderError):
    code = "not_found"
    status_code = 404


class DuplicateNameError(LadderError):
    code = "duplicate_name"
    status_code = 409


class InvalidNameError(LadderError):
    code = "invalid_name"


class SamePlayerError(LadderError):
    code = "same_player"


class TieScoreError(LadderError):
    code = "tie_score"


class InvalidScoreError(LadderError):
    code = "invalid_score"


class InvalidStateError(LadderError):
    code = "invalid_state"
    status_code = 409


class InvalidOrderError(LadderError):
    code = "invalid_order"


class PersistenceError(RuntimeError):
    """A storage adapter could not write the ladder."""


class PublishError(RuntimeError):
    """The publish target rejected or failed the commit."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
