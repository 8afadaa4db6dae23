"""Reusable field checks shared by the rule modules.

Each check appends at most one Violation to the issues list and returns
whether the value passed, so callers can skip dependent checks.
"""

import re
from typing import Any, Iterable, Optional

from email_validator import EmailNotValidError, validate_email

from ..models import Violation, ViolationRule

# "+" followed by 9-15 ASCII digits
PHONE_PATTERN = re.compile(r"^\+[0-9]{9,15}$")
NUMERIC_PATTERN = re.compile(r"^[0-9]+$")

# Integer fields are stored as signed 64-bit columns
INT64_MAX = 2**63 - 1


def check_required(issues: list[Violation], field: str, value: Any) -> bool:
    """Value must be present and, for strings, not blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        issues.append(Violation(field, ViolationRule.REQUIRED, "value is required"))
        return False
    return True


def check_length(
    issues: list[Violation],
    field: str,
    value: str,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> bool:
    """Length (in characters) must lie within the given bounds."""
    length = len(value)
    if min_length is not None and length < min_length:
        issues.append(Violation(
            field, ViolationRule.MIN_LENGTH,
            f"length {length} is shorter than {min_length}",
            {"min": min_length, "actual": length},
        ))
        return False
    if max_length is not None and length > max_length:
        issues.append(Violation(
            field, ViolationRule.MAX_LENGTH,
            f"length {length} exceeds {max_length}",
            {"max": max_length, "actual": length},
        ))
        return False
    return True


def check_alphanumeric(issues: list[Violation], field: str, value: str) -> bool:
    """Only unicode letters and digits are allowed."""
    if not value.isalnum():
        issues.append(Violation(
            field, ViolationRule.ALPHANUMERIC, "only letters and digits are allowed"
        ))
        return False
    return True


def check_ascii(issues: list[Violation], field: str, value: str) -> bool:
    """Only ASCII characters are allowed."""
    if not value.isascii():
        issues.append(Violation(field, ViolationRule.ASCII, "only ASCII characters are allowed"))
        return False
    return True


def check_numeric(issues: list[Violation], field: str, value: str) -> bool:
    """Only ASCII digits are allowed."""
    if not NUMERIC_PATTERN.match(value):
        issues.append(Violation(field, ViolationRule.NUMERIC, "only digits are allowed"))
        return False
    return True


def check_one_of(issues: list[Violation], field: str, value: str, allowed: Iterable[str]) -> bool:
    """Value must be one of the allowed literals."""
    allowed = tuple(allowed)
    if value not in allowed:
        issues.append(Violation(
            field, ViolationRule.ONE_OF,
            f"'{value}' is not one of {', '.join(allowed)}",
            {"allowed": list(allowed)},
        ))
        return False
    return True


def check_phone(issues: list[Violation], field: str, value: str) -> bool:
    """Phone must look like +<country><digits>, 9 to 15 digits in total."""
    if not PHONE_PATTERN.match(value):
        issues.append(Violation(
            field, ViolationRule.PHONE, "expected '+' followed by 9-15 digits"
        ))
        return False
    return True


def check_email(issues: list[Violation], field: str, value: str) -> bool:
    """Email must be syntactically valid. Deliverability is not checked."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        issues.append(Violation(field, ViolationRule.EMAIL, str(e)))
        return False
    return True


def check_greater_than(issues: list[Violation], field: str, value: int, bound: int) -> bool:
    if value <= bound:
        issues.append(Violation(
            field, ViolationRule.GREATER_THAN, f"{value} must be greater than {bound}"
        ))
        return False
    return True


def check_at_least(issues: list[Violation], field: str, value: int, bound: int) -> bool:
    if value < bound:
        issues.append(Violation(
            field, ViolationRule.GREATER_OR_EQUAL, f"{value} must be at least {bound}"
        ))
        return False
    return True


def check_at_most(issues: list[Violation], field: str, value: int, bound: int) -> bool:
    if value > bound:
        issues.append(Violation(
            field, ViolationRule.LESS_OR_EQUAL, f"{value} must be at most {bound}"
        ))
        return False
    return True


def check_text(
    issues: list[Violation],
    field: str,
    value: str,
    *,
    alphanumeric: bool = False,
    ascii_only: bool = False,
    numeric: bool = False,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> None:
    """Required string with optional character class and length bounds."""
    if not check_required(issues, field, value):
        return
    if alphanumeric and not check_alphanumeric(issues, field, value):
        return
    if ascii_only and not check_ascii(issues, field, value):
        return
    if numeric and not check_numeric(issues, field, value):
        return
    check_length(issues, field, value, min_length, max_length)
