"""Domain models for authentication requests and user profiles.

Role semantics are owned by the backend; the client only carries the value.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .common import AuthToken


@dataclass
class LoginRequest:
    username: str
    password: str

    def to_payload(self) -> Dict[str, Any]:
        return {"username": self.username, "password": self.password}


@dataclass
class RegisterRequest:
    username: str
    password: str
    confirm_password: str
    display_name: str
    role: str = "student"
    email: Optional[str] = None
    grade: Optional[str] = None
    school: Optional[str] = None
    favorite_subjects: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "username": self.username,
            "password": self.password,
            "confirmPassword": self.confirm_password,
            "displayName": self.display_name,
            "role": self.role,
        }
        for key, value in (("email", self.email), ("grade", self.grade), ("school", self.school)):
            if value:
                payload[key] = value
        if self.favorite_subjects:
            payload["preferences"] = {"favoriteSubjects": list(self.favorite_subjects)}
        return payload


@dataclass
class UserProfile:
    id: str
    username: str
    display_name: str
    role: str = "student"
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    grade: Optional[str] = None
    school: Optional[str] = None
    favorite_subjects: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        preferences = data.get("preferences") or {}
        return cls(
            id=str(data.get("id", "")),
            username=str(data.get("username", "")),
            display_name=str(data.get("displayName", "")),
            role=str(data.get("role", "student")),
            email=data.get("email"),
            avatar_url=data.get("avatarUrl"),
            grade=data.get("grade"),
            school=data.get("school"),
            favorite_subjects=list(preferences.get("favoriteSubjects") or []),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class AuthResponse:
    token: AuthToken
    user: UserProfile

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthResponse":
        return cls(token=AuthToken(str(data["token"])), user=UserProfile.from_dict(data.get("user") or {}))


@dataclass
class UpdateProfileRequest:
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    grade: Optional[str] = None
    school: Optional[str] = None
    favorite_subjects: Optional[List[str]] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for key, value in (
            ("displayName", self.display_name),
            ("avatarUrl", self.avatar_url),
            ("email", self.email),
            ("grade", self.grade),
            ("school", self.school),
        ):
            if value is not None:
                payload[key] = value
        if self.favorite_subjects is not None:
            payload["preferences"] = {"favoriteSubjects": list(self.favorite_subjects)}
        return payload
