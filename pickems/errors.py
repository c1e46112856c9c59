"""
Exceptions raised by the data-access and scoring layers.

Routes translate these into responses: ValidationError becomes field errors,
NotFound becomes a 404 and ConstraintViolation is logged and reported as a
generic failure.
"""


class PickemError(Exception):
    """Base class for application errors"""


class ValidationError(PickemError):
    """Invalid input, carrying a field-keyed error map"""

    def __init__(self, errors, message="Validation failed"):
        super().__init__(message)
        self.errors = errors


class NotFound(PickemError):
    """A league, team, user or pick referenced by id does not exist"""

    def __init__(self, kind, identifier):
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class ConstraintViolation(PickemError):
    """Unexpected duplicate-key or integrity failure on write"""
