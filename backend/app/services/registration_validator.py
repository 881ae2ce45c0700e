"""
Field rules for registration payloads.

Every rule runs on every request so the client gets the full list of problems
at once. Nothing here touches the database or the upload directory.
"""

import re
from datetime import date, datetime
from typing import Any, Mapping, Optional
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel

MIN_PASSWORD_LENGTH = 6

# ASCII digits with the usual separators, optional leading +
_PHONE_PATTERN = re.compile(r"\+?[0-9 ().-]+")
_PHONE_MIN_DIGITS = 10
_PHONE_MAX_DIGITS = 15


class RuleViolation(BaseModel):
    field: str
    message: str


def parse_birth_date(value: Any) -> Optional[date]:
    """Parse an ISO 8601 date (or datetime) string, None if it is not one"""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        if "T" in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        return None


def is_mobile_phone(value: Any) -> bool:
    if not isinstance(value, str) or not _PHONE_PATTERN.fullmatch(value.strip()):
        return False
    digits = re.sub(r"[^0-9]", "", value)
    return _PHONE_MIN_DIGITS <= len(digits) <= _PHONE_MAX_DIGITS


def is_email(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_registration(payload: Mapping[str, Any]) -> list[RuleViolation]:
    """
    Check a registration payload against the field rules.

    Returns every violated rule as (field, message); an empty list means the
    payload is valid.
    """
    errors: list[RuleViolation] = []

    user_name = payload.get("userName")
    if not isinstance(user_name, str) or not user_name.strip():
        errors.append(RuleViolation(field="userName", message="Username is required"))

    if not is_email(payload.get("email")):
        errors.append(RuleViolation(field="email", message="Invalid email"))

    password = payload.get("password")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors.append(RuleViolation(
            field="password",
            message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        ))

    if parse_birth_date(payload.get("dataNascimento")) is None:
        errors.append(RuleViolation(
            field="dataNascimento",
            message="Invalid birth date (ISO 8601 format)"
        ))

    if not is_mobile_phone(payload.get("telefone")):
        errors.append(RuleViolation(field="telefone", message="Invalid phone number"))

    return errors
