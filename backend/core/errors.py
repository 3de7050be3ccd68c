"""Domain errors raised by the record store and the services.

Routes translate these into HTTP responses; none of them is fatal.
"""


class FieldValidationError(ValueError):
    """A required field is missing or out of range."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class ReferentialIntegrityError(FieldValidationError):
    """A record points at a user that does not exist or has the wrong role."""


class BusinessRuleViolation(Exception):
    """A rule of the marketplace refused the action; nothing was written."""

    status_code = 400
    default_message = 'Action not permitted.'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(BusinessRuleViolation):
    status_code = 401
    default_message = 'Sign in to continue.'


class RoleNotPermitted(BusinessRuleViolation):
    status_code = 403
    default_message = 'Your role does not allow this action.'


class CourseNotFound(BusinessRuleViolation):
    status_code = 404
    default_message = 'Course not found.'


class UserNotFound(BusinessRuleViolation):
    status_code = 404
    default_message = 'User not found. Please check your email or register.'


class CourseFull(BusinessRuleViolation):
    status_code = 409
    default_message = 'Course is full!'


class EmailAlreadyRegistered(BusinessRuleViolation):
    status_code = 409
    default_message = 'Email already exists. Please login.'


class CollaboratorUnavailable(Exception):
    """The text-generation service could not produce a draft."""
