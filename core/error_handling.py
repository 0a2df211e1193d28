import traceback
from logger import logger
from core.security import redact_log


class AppError(Exception):
    """
    Standardized application error that carries a code and user-facing message.
    """
    default_code = "GENERIC_000"

    def __init__(self, message: str, code: str = None, details: str = None):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.details = details or ""

    def __str__(self):
        return f"[{self.code}] {self.message}"


class InvalidInputError(AppError):
    """Template bytes (or their Base64 form) are missing or blank."""
    default_code = "DOCX_INPUT_001"


class MalformedTemplateError(AppError):
    """Template bytes do not open as a Word package."""
    default_code = "DOCX_PARSE_001"


class ImageDecodeError(AppError):
    """An image stream bound to a placeholder could not be read or recognized."""
    default_code = "DOCX_IMAGE_001"


class SerializationError(AppError):
    """The filled document could not be written back out."""
    default_code = "DOCX_SAVE_001"


class ConversionError(AppError):
    """The office converter process failed or produced no output."""
    default_code = "PDF_CONVERT_001"


class LicenseError(AppError):
    default_code = "AUTH_LICENSE_001"


def handle_error(
    e: Exception,
    code: str = "GENERIC_000",
    user_message: str = None,
    raise_it: bool = False,
    error_cls: type = AppError,
):
    """
    Centralized error handler.

    Logs the error under ``code``. With ``raise_it`` the error is raised as
    ``error_cls`` (chained from ``e``); an ``AppError`` is re-raised unchanged
    so its original code survives nested handlers.
    """
    error_str = redact_log(str(e))
    tb_str = redact_log(traceback.format_exc())

    logger.error(
        f"[{code}] ❌ Error\n"
        f"→ Exception: {error_str}\n"
        f"→ Traceback: {tb_str}"
    )

    if raise_it:
        if isinstance(e, AppError):
            raise e
        raise error_cls(user_message or error_str, code=code, details=error_str) from e

    user_friendly = user_message or "An unexpected error occurred. Please contact support."
    return f"❌ {user_friendly} (Error Code: {code})"


def log_warning(msg: str, code: str = "GENERIC_WARN", context: dict = None):
    ctx = f" ctx={context}" if context else ""
    logger.warning(f"[{code}] ⚠️ Warning{ctx}: {redact_log(msg)}")


def log_info(msg: str, code: str = "GENERIC_INFO", context: dict = None):
    ctx = f" ctx={context}" if context else ""
    logger.info(f"[{code}] ℹ️ Info{ctx}: {redact_log(msg)}")
