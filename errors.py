"""Domain errors raised by the catalog core.

Each error carries the HTTP status and a stable ``code`` so the boundary can
answer with a structured body instead of a generic failure.
"""

from fastapi import status


class BookshelfError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "error"
    default_detail = "Unexpected error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(BookshelfError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Resource not found"


class ForbiddenError(BookshelfError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "Not authorized"


class DuplicateReviewError(BookshelfError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_review"
    default_detail = "You have already reviewed this book"


class ValidationError(BookshelfError):
    status_code = 422
    code = "validation_error"
    default_detail = "Invalid input"


class TransientError(BookshelfError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "transient"
    default_detail = "Storage temporarily unavailable"


class UnauthenticatedError(BookshelfError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_detail = "Not authenticated"
