from typing import Dict, Optional


class AppError(Exception):
    """Base for failures that map onto an HTTP status and an {"error": ...} body."""

    status_code = 500
    message = "Server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    message = "All fields are required"


class DuplicateUserError(ValidationError):
    status_code = 409
    message = "User already exists"


class Unauthenticated(AppError):
    status_code = 401
    message = "Access denied"
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidToken(AppError):
    status_code = 400
    message = "Invalid token"


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid credentials"


class UserNotFound(AppError):
    status_code = 404
    message = "User not found"


class PayloadTooLarge(AppError):
    status_code = 413
    message = "Request body too large"


class StoreError(AppError):
    message = "Database error"


class ChatProcessingError(AppError):
    message = "Chat processing failed"


class VoiceProcessingError(AppError):
    message = "Voice processing failed"
