# tests/utils/test_errors.py

from powerbudget.utils.errors import (
    ConfigError,
    DuplicateDeviceError,
    PowerBudgetError,
    ValidationError,
    error_dict,
    exception_dict,
    format_error,
    success_dict,
)


def test_hierarchy():
    for exc_type in (DuplicateDeviceError, ValidationError, ConfigError):
        assert issubclass(exc_type, PowerBudgetError)


def test_exception_dict_uses_error_type():
    result = exception_dict(DuplicateDeviceError("pump"))
    assert result == {
        "ok": False,
        "error": "DUPLICATE_ID",
        "message": "Device 'pump' is already connected",
    }
    assert exception_dict(ValidationError("bad"))["error"] == "INVALID_INPUT"
    assert exception_dict(PowerBudgetError("x"))["error"] == "POWER_BUDGET_ERROR"


def test_success_and_error_dicts():
    assert success_dict("done", allocated=12) == {"ok": True, "status": "done", "allocated": 12}
    assert error_dict("E", "msg", step=3) == {"ok": False, "error": "E", "message": "msg", "step": 3}


def test_formatters():
    assert format_error("E", "broken") == "⚠ E: broken"
    assert format_error("E", "broken", "fix it") == "⚠ E: broken\n  → fix it"
