"""Error taxonomy shared by the service layer and the HTTP handlers.

Every error carries an HTTP status, a stable machine-readable ``code`` and a
message that is safe to show to users.
"""


class VotingError(Exception):
    status_code = 500
    code = "internal_error"
    default_message = "Internal Server Error"

    def __init__(self, message: str = None, code: str = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class ValidationError(VotingError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid input"


class Unauthenticated(VotingError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Invalid or expired token"


class Forbidden(VotingError):
    status_code = 403
    code = "forbidden"
    default_message = "Not allowed"


class NotFound(VotingError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(VotingError):
    status_code = 409
    code = "conflict"
    default_message = "Conflict"


class AlreadyVoted(Conflict):
    code = "already_voted"
    default_message = "You have already voted"


class InternalFailure(VotingError):
    pass
