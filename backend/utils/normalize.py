"""
Input Normalization Utilities
=============================

Single source of truth for parsing external inputs (query params, env vars).

Usage:
    from utils.normalize import to_date, to_enum, ValidationError

    @analytics_bp.route("/trends")
    def trends():
        try:
            granularity = to_enum(request.args.get("granularity"), Granularity,
                                  default=Granularity.WEEK, field="granularity")
        except ValidationError as e:
            return validation_error_response(e)

Strict callers turn ValidationError into a 400. The global dashboard filters
are forgiving and treat a ValidationError as "no filter" instead.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Type, TypeVar, Union

E = TypeVar('E', bound=Enum)


class ValidationError(ValueError):
    """Raised when input cannot be normalized to expected type."""

    def __init__(self, message: str, field: str = None, received_value=None):
        super().__init__(message)
        self.field = field
        self.received_value = received_value


def to_int(
    value: Optional[str],
    *,
    default: Optional[int] = None,
    field: str = None
) -> Optional[int]:
    """
    Convert string to int, with explicit None handling.

    Args:
        value: Input string (query param or env var)
        default: Value to return if input is None or empty
        field: Field name for error messages

    Raises:
        ValidationError: If value cannot be converted to int
    """
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"Expected int, got {type(value).__name__}: {value!r}",
            field=field,
            received_value=value
        )


def to_date(
    value: Optional[Union[str, date]],
    *,
    default: Optional[date] = None,
    field: str = None
) -> Optional[date]:
    """
    Convert string to date object.

    Accepts formats:
        - YYYY-MM-DD (full date)
        - YYYY-MM (first of month)
        - YYYY-MM-DDTHH:MM[:SS...] (ISO timestamp, date part only)
        - Already a date object (passthrough)
        - Already a datetime object (extracts date)

    Raises:
        ValidationError: If value cannot be parsed as date
    """
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        value = value.strip()
        if len(value) == 7:  # YYYY-MM
            return datetime.strptime(value, "%Y-%m").date()
        if len(value) > 10 and value[10] == 'T':
            return datetime.strptime(value[:10], "%Y-%m-%d").date()
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(
            f"Expected date (YYYY-MM-DD), got {type(value).__name__}: {value!r}",
            field=field,
            received_value=value
        )


def to_str(
    value: Optional[str],
    *,
    default: Optional[str] = None,
    strip: bool = True,
    lower: bool = False,
) -> Optional[str]:
    """
    Normalize string input, optionally stripping whitespace / lowercasing.

    Whitespace-only input counts as empty and yields the default.
    """
    if value is None or value == "":
        return default
    result = str(value)
    if strip:
        result = result.strip()
    if result == "":
        return default
    return result.lower() if lower else result


def to_enum(
    value: Optional[str],
    enum_class: Type[E],
    *,
    default: Optional[E] = None,
    field: str = None
) -> Optional[E]:
    """
    Convert string to enum member.

    Args:
        value: Input string (case-insensitive match against values, then names)
        enum_class: The enum class to convert to
        default: Value to return if input is None or empty
        field: Field name for error messages

    Raises:
        ValidationError: If value doesn't match any enum member
    """
    if value is None or value == "":
        return default

    value_lower = value.lower()
    for member in enum_class:
        if str(member.value).lower() == value_lower:
            return member

    try:
        return enum_class[value.upper().replace(" ", "_").replace("-", "_")]
    except KeyError:
        pass

    valid_values = [m.value for m in enum_class]
    raise ValidationError(
        f"Expected one of {valid_values}, got: {value!r}",
        field=field,
        received_value=value
    )


def validation_error_response(error: ValidationError) -> tuple:
    """
    Convert ValidationError to a structured 400 response tuple.

    Returns:
        Tuple of (dict, 400) suitable for Flask response
    """
    response = {
        "error": str(error),
        "type": "validation_error"
    }
    if error.field:
        response["field"] = error.field
    if error.received_value is not None:
        response["received_value"] = str(error.received_value)
    return response, 400
