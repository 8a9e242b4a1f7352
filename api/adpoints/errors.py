"""Error taxonomy. Every AppError reaches the client as {"error": message}."""


class AppError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request"


class DuplicateUsername(ValidationError):
    message = "Username already exists"


class InvalidCredentials(ValidationError):
    message = "Invalid credentials"


class InvalidAction(ValidationError):
    message = "Invalid action"


class AuthError(AppError):
    status_code = 403
    message = "Forbidden"


class TokenMissing(AuthError):
    status_code = 401
    message = "Unauthorized"


class TokenInvalid(AuthError):
    message = "Invalid token"


class Forbidden(AuthError):
    message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class UserNotFound(NotFoundError):
    message = "User not found"


class AdNotFound(NotFoundError):
    message = "Ad not found"


class RedemptionNotFound(NotFoundError):
    message = "Redemption not found"


class ConflictError(AppError):
    status_code = 400
    message = "Conflict"


class CooldownActive(ConflictError):
    message = "Cooldown active"

    def __init__(self, retry_after_ms: int = 0):
        self.retry_after_ms = retry_after_ms
        super().__init__()


class RedemptionClosed(ConflictError):
    status_code = 409

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Redemption already {status}")
