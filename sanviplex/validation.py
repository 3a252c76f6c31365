from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MIN_PASSWORD_LENGTH = 8


@dataclass
class PasswordCheck:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def is_valid_email(email: str) -> bool:
    if not isinstance(email, str):
        return False
    return _EMAIL_RE.fullmatch(email) is not None


def validate_password(password: str) -> PasswordCheck:
    errors: List[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    return PasswordCheck(is_valid=not errors, errors=errors)
