class DomainError(Exception):
    """
    Base class for recoverable domain errors.

    Every error carries a stable machine-readable code, a human message
    and optional details that end up in the JSON error body.
    """
    status_code = 400

    def __init__(self, code, message=None, **details):
        super().__init__(message or code)
        self.code = code
        self.message = message or code
        self.details = details

    def to_dict(self):
        return {"error": self.code, "message": self.message, **self.details}


class NotFound(DomainError):
    status_code = 404


class Conflict(DomainError):
    status_code = 409


class VersionConflict(Conflict):
    def __init__(self, message="Version conflict", **details):
        super().__init__("VERSION_CONFLICT", message, **details)


class Forbidden(DomainError):
    status_code = 403


class ValidationError(DomainError):
    status_code = 400


class InvariantViolation(ValidationError):
    """Structural invariant of a module tree is broken."""
