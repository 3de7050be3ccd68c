from fastapi import HTTPException, status

from backend.core.errors import BusinessRuleViolation, FieldValidationError

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, FieldValidationError):
        return HTTPException(
            status_code=422,
            detail={'field': exc.field, 'message': exc.message},
        )
    if isinstance(exc, BusinessRuleViolation):
        return HTTPException(status_code=exc.status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=DATABASE_UNAVAILABLE)
