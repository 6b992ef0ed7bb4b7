# errors.py
"""
Error taxonomy for the Resume ATS Analyzer.

Every error that reaches a route is an AppError. The exception handler in
main.py turns it into {"success": false, "message": ...}; nothing else
about the failure leaves the server.
"""


class AppError(Exception):
    status_code = 500
    message = "Analysis failed"

    def __init__(self, message: str = None, detail: str = None):
        self.message = message or self.message
        self.detail = detail  # server-side diagnostics only
        super().__init__(self.message)


# ─── Accounts ─────────────────────────────────────────────────────────────────

class ValidationError(AppError):
    status_code = 400
    message = "Username and password required"


class ConflictOrStoreError(AppError):
    status_code = 409
    message = "User already exists or DB error"


class NotFoundError(AppError):
    status_code = 401
    message = "User not found"


class InvalidCredentialsError(AppError):
    status_code = 401
    message = "Invalid password"


# ─── Access gate ──────────────────────────────────────────────────────────────

class AuthenticationRequiredError(AppError):
    status_code = 401
    message = "Please log in to continue"


class QuotaExceededError(AppError):
    status_code = 401
    message = "Demo limit reached. Please log in or register to continue."


# ─── Analysis pipeline ────────────────────────────────────────────────────────

class NoFileError(AppError):
    status_code = 400
    message = "No file uploaded"


class UnsupportedFormatError(AppError):
    status_code = 415
    message = "Unsupported file format"


class ExtractionError(AppError):
    status_code = 422
    message = "Could not read the uploaded file"


class CompletionError(AppError):
    status_code = 502
    message = "Analysis failed"


class ResponseFormatError(AppError):
    status_code = 502
    message = "AI response format error. Please retry."

    def __init__(self, raw_text: str, detail: str = None):
        super().__init__(detail=detail)
        self.raw_text = raw_text
