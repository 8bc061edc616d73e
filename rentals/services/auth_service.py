"""Registration and sign-in, delegated to the repository's identity provider."""

from __future__ import annotations

from datetime import datetime, timezone

from ..errors import AuthError
from ..models.user import AuthSession, RegisterRequest, UserProfile
from ..utils.logging import get_logger, kv

LOGGER = get_logger("services.auth")


class AuthService:
    def __init__(self, repository):
        self.repository = repository

    def register(self, req: RegisterRequest) -> AuthSession:
        display_name = f"{req.first_name} {req.last_name}".strip()
        user_id = self.repository.sign_up(req.email, req.password, display_name)
        profile = UserProfile(
            id=user_id,
            email=req.email,
            first_name=req.first_name,
            last_name=req.last_name,
            user_type=req.user_type,
            created_at=datetime.now(timezone.utc),
            verified=False,
        )
        self.repository.save_user(profile)
        LOGGER.info(kv("registered", user_id=user_id, user_type=req.user_type))
        return AuthSession(user_id=user_id, email=req.email, display_name=display_name)

    def login(self, email: str, password: str) -> AuthSession:
        try:
            user_id, token = self.repository.sign_in(email, password)
        except AuthError:
            LOGGER.info(kv("login_rejected", email=email))
            raise
        profile = self.repository.get_user(user_id)
        display_name = profile.display_name if profile else ""
        return AuthSession(user_id=user_id, email=email, display_name=display_name, access_token=token)

    def logout(self) -> None:
        self.repository.sign_out()
