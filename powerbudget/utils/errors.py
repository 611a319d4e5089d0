# powerbudget/utils/errors.py
"""Error types and formatting utilities."""


class PowerBudgetError(Exception):
    """Base class for errors raised by the allocator."""

    error_type = "POWER_BUDGET_ERROR"


class DuplicateDeviceError(PowerBudgetError):
    """A device with the same id is already connected."""

    error_type = "DUPLICATE_ID"

    def __init__(self, device_id):
        super().__init__(f"Device '{device_id}' is already connected")
        self.device_id = device_id


class ValidationError(PowerBudgetError):
    """Input validation errors."""

    error_type = "INVALID_INPUT"


class ConfigError(PowerBudgetError):
    """Inconsistent allocator configuration."""

    error_type = "INVALID_CONFIG"


def format_error(error_type, message, suggestion=None):
    """Format an error message for display.

    Args:
        error_type (str): Type of error (e.g., "DUPLICATE_ID", "INVALID_INPUT")
        message (str): Error message
        suggestion (str, optional): Helpful suggestion for the user

    Returns:
        str: Formatted error message
    """
    output = f"⚠ {error_type}: {message}"
    if suggestion:
        output += f"\n  → {suggestion}"
    return output


def success_dict(message, **kwargs):
    """Create a success response dictionary.

    Args:
        message (str): Success message
        **kwargs: Additional fields to include in response

    Returns:
        dict: Success dictionary
    """
    result = {
        "ok": True,
        "status": message
    }
    result.update(kwargs)
    return result


def error_dict(error_type, message, **kwargs):
    """Create an error response dictionary.

    Args:
        error_type (str): Error type
        message (str): Error message
        **kwargs: Additional fields to include in response

    Returns:
        dict: Error dictionary
    """
    result = {
        "ok": False,
        "error": error_type,
        "message": message
    }
    result.update(kwargs)
    return result


def exception_dict(exc):
    """Convert a PowerBudgetError into an error response dictionary."""
    return error_dict(getattr(exc, "error_type", PowerBudgetError.error_type), str(exc))
