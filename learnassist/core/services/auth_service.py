"""
Core service for the credential lifecycle.

Logs users in and out, registers new accounts and reads or updates the
current profile. The gateway talks to the backend (or a fixture); this
service owns storing and clearing the resulting credential.
"""

import logging

from learnassist.core.api_client import ApiClient
from learnassist.domain.interfaces.auth_gateway import AuthGateway
from learnassist.domain.models.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserProfile,
)
from learnassist.domain.models.errors import ValidationError

logger = logging.getLogger(__name__)


class AuthService:
    """Handles login, registration, logout and profile access."""

    def __init__(self, gateway: AuthGateway, api_client: ApiClient):
        self.gateway = gateway
        self.api_client = api_client

    async def login(self, credentials: LoginRequest) -> AuthResponse:
        """Authenticates and stores the returned credential.

        Raises:
            ValidationError: If username or password is empty.
            StorageError: If the credential could not be persisted.
        """
        if not credentials.username or not credentials.password:
            raise ValidationError("Username and password are required")
        response = await self.gateway.login(credentials)
        await self.api_client.set_auth_token(response.token)
        logger.info(f"Logged in as {response.user.username}")
        return response

    async def register(self, request: RegisterRequest) -> AuthResponse:
        if not request.username or not request.password:
            raise ValidationError("Username and password are required")
        if request.password != request.confirm_password:
            raise ValidationError("Passwords do not match")
        response = await self.gateway.register(request)
        await self.api_client.set_auth_token(response.token)
        logger.info(f"Registered and logged in as {response.user.username}")
        return response

    async def logout(self) -> None:
        """Forgets the credential and every cached response made with it."""
        await self.api_client.clear_auth_token()
        await self.api_client.clear_cache()
        logger.info("Logged out")

    async def is_authenticated(self) -> bool:
        return await self.api_client.has_auth_token()

    async def get_current_user(self) -> UserProfile:
        return await self.gateway.fetch_profile()

    async def update_profile(self, request: UpdateProfileRequest) -> UserProfile:
        return await self.gateway.update_profile(request)
