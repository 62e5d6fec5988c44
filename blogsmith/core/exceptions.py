"""
Domain error taxonomy.

Services raise these; ``blogsmith.api.errors`` turns them into
``{"success": false, "message": ...}`` responses using ``status_code``.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidId(ValidationError):
    default_message = "Invalid post ID"


class DuplicateEmail(ValidationError):
    default_message = "User with this email already exists"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Not authorized"


class InvalidCredentials(Unauthenticated):
    # Same message for unknown email and wrong password
    default_message = "Invalid credentials"


class Forbidden(AppError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class GenerationFailed(AppError):
    status_code = 500
    default_message = "Failed to generate content. Please try again."


class InternalError(AppError):
    status_code = 500
