"""AuthGateway implementations: the real backend and a local fixture."""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from learnassist.core.api_client import ApiClient
from learnassist.domain.interfaces.auth_gateway import AuthGateway
from learnassist.domain.models.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserProfile,
)
from learnassist.domain.models.common import AuthToken, EndpointPath
from learnassist.domain.models.errors import ServerError

logger = logging.getLogger(__name__)

LOGIN_PATH = EndpointPath("/api/auth/login")
REGISTER_PATH = EndpointPath("/api/auth/register")
PROFILE_PATH = EndpointPath("/api/user/profile")
UPDATE_PROFILE_PATH = EndpointPath("/api/user/update")

MOCK_TOKEN = AuthToken("mock-token-for-testing")


def _user_from(data: object) -> UserProfile:
    if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
        raise ServerError("Malformed user profile response", data=data)
    return UserProfile.from_dict(data["user"])


class BackendAuthGateway(AuthGateway):
    """Calls the authentication and profile endpoints."""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    async def login(self, credentials: LoginRequest) -> AuthResponse:
        logger.info(f"Logging in user: {credentials.username}")
        data = await self.api_client.post(LOGIN_PATH, credentials.to_payload())
        if not isinstance(data, dict) or not data.get("token"):
            raise ServerError("Login response carried no token", data=data)
        return AuthResponse.from_dict(data)

    async def register(self, request: RegisterRequest) -> AuthResponse:
        logger.info(f"Registering user: {request.username}")
        data = await self.api_client.post(REGISTER_PATH, request.to_payload())
        if not isinstance(data, dict) or not data.get("token"):
            raise ServerError("Registration response carried no token", data=data)
        return AuthResponse.from_dict(data)

    async def fetch_profile(self) -> UserProfile:
        return _user_from(await self.api_client.get(PROFILE_PATH, use_cache=True))

    async def update_profile(self, request: UpdateProfileRequest) -> UserProfile:
        user = _user_from(await self.api_client.put(UPDATE_PROFILE_PATH, request.to_payload()))
        await self.api_client.invalidate_cache(PROFILE_PATH)
        return user


class FixtureAuthGateway(AuthGateway):
    """Accepts any credentials and returns a fixed test user."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._profile: Optional[UserProfile] = None

    def _timestamp(self) -> str:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc).isoformat()

    def _default_profile(self, username: str = "testuser") -> UserProfile:
        now = self._timestamp()
        return UserProfile(
            id="1",
            username=username,
            display_name="Test User",
            role="student",
            email="test@example.com",
            grade="Grade 10",
            school="Test School",
            favorite_subjects=["mathematics", "physics"],
            created_at=now,
            updated_at=now,
        )

    async def login(self, credentials: LoginRequest) -> AuthResponse:
        logger.info("Using mock login data")
        self._profile = self._default_profile(credentials.username)
        return AuthResponse(token=MOCK_TOKEN, user=self._profile)

    async def register(self, request: RegisterRequest) -> AuthResponse:
        logger.info("Using mock register data")
        now = self._timestamp()
        self._profile = UserProfile(
            id="1",
            username=request.username,
            display_name=request.display_name,
            role=request.role,
            email=request.email,
            grade=request.grade,
            school=request.school,
            favorite_subjects=list(request.favorite_subjects),
            created_at=now,
            updated_at=now,
        )
        return AuthResponse(token=MOCK_TOKEN, user=self._profile)

    async def fetch_profile(self) -> UserProfile:
        logger.info("Using mock user profile")
        if self._profile is None:
            self._profile = self._default_profile()
        return self._profile

    async def update_profile(self, request: UpdateProfileRequest) -> UserProfile:
        logger.info("Using mock update profile")
        profile = await self.fetch_profile()
        for attr in ("display_name", "avatar_url", "email", "grade", "school", "favorite_subjects"):
            value = getattr(request, attr)
            if value is not None:
                setattr(profile, attr, value)
        profile.updated_at = self._timestamp()
        return profile
