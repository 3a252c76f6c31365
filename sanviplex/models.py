from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


DEFAULT_PREFERENCES: Dict[str, Any] = {
    "language": "en",
    "theme": "dark",
    "notifications": True,
    "autoplay": True,
}


@dataclass
class TokenPair:
    access: str
    refresh: str

    def to_dict(self) -> Dict[str, str]:
        return {"access": self.access, "refresh": self.refresh}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["TokenPair"]:
        if not isinstance(data, dict):
            return None
        access = data.get("access") or data.get("accessToken")
        refresh = data.get("refresh") or data.get("refreshToken")
        if not isinstance(access, str) or not access:
            return None
        if not isinstance(refresh, str) or not refresh:
            return None
        return cls(access=access, refresh=refresh)


@dataclass
class UserProfile:
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    email_verified: bool = False
    preferences: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_PREFERENCES))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email_verified": self.email_verified,
            "full_name": self.full_name,
            "preferences": dict(self.preferences),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["UserProfile"]:
        if not isinstance(data, dict):
            return None
        email = data.get("email")
        if not isinstance(email, str) or not email:
            return None
        user_id = data.get("id")
        prefs = data.get("preferences") if isinstance(data.get("preferences"), dict) else {}
        merged = dict(DEFAULT_PREFERENCES)
        merged.update(prefs)
        return cls(
            id=str(user_id) if user_id is not None else "",
            email=email,
            first_name=data.get("first_name") or data.get("firstName") or "",
            last_name=data.get("last_name") or data.get("lastName") or "",
            email_verified=bool(data.get("email_verified", False)),
            preferences=merged,
        )


@dataclass
class MessageResult:
    message: str
    email: str

    @classmethod
    def from_dict(cls, data: Any) -> "MessageResult":
        data = data if isinstance(data, dict) else {}
        return cls(message=str(data.get("message") or ""), email=str(data.get("email") or ""))


@dataclass
class Authenticated:
    tokens: TokenPair
    user: UserProfile


@dataclass
class VerificationRequired:
    email: str
    message: str = ""


LoginOutcome = Union[Authenticated, VerificationRequired]
