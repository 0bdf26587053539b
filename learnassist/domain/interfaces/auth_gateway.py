"""Interface for the authentication backend.

Gateways only talk to the backend (or a fixture); credential storage is
the auth service's job.
"""

import abc

from ..models.auth import AuthResponse, LoginRequest, RegisterRequest, UpdateProfileRequest, UserProfile


class AuthGateway(abc.ABC):
    """Abstract Base Class for login, registration and profile endpoints."""

    @abc.abstractmethod
    async def login(self, credentials: LoginRequest) -> AuthResponse:
        pass

    @abc.abstractmethod
    async def register(self, request: RegisterRequest) -> AuthResponse:
        pass

    @abc.abstractmethod
    async def fetch_profile(self) -> UserProfile:
        """Returns the profile of the user owning the current credential."""
        pass

    @abc.abstractmethod
    async def update_profile(self, request: UpdateProfileRequest) -> UserProfile:
        pass
