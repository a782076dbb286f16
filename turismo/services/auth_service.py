import logging
from functools import lru_cache
from typing import Optional, Tuple

import bcrypt

from turismo.core import (
    BaseService, ValidationError, AuthenticationError, AuthorizationError, NotFoundError,
    Settings, get_settings,
)
from turismo.infrastructure.repositories import UserRepository
from turismo.models import User
from turismo.roles import Role
from turismo.security import mint_tokens, decode_token, create_token
from turismo.timeutils import utcnow

logger = logging.getLogger(__name__)

WEAK_PASSWORDS = {"changeme123!", "password", "123456", "admin"}


@lru_cache()
def _dummy_hash() -> bytes:
    """Real bcrypt hash compared against when the email is unknown"""
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt())


def token_claims(user: User) -> dict:
    return {"email": user.email, "name": user.name}


class AuthService(BaseService):
    """Operator authentication and the seed admin account"""

    def __init__(self, session, user_repo: Optional[UserRepository] = None):
        super().__init__(session)
        self.user_repo = user_repo or UserRepository(session)

    async def authenticate_user(self, email: str, password: str) -> Tuple[User, str, str]:
        """Authenticate user with email and password.

        Unknown emails and wrong passwords produce the same error.
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            self._verify_password(password, _dummy_hash().decode("utf-8"))
            raise AuthenticationError("Invalid credentials")

        if not self._verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")

        if not user.active:
            raise AuthorizationError("Account is inactive")

        user.last_login_at = utcnow()
        await self.session.flush()

        access_token, refresh_token = mint_tokens(user.id, user.role, **token_claims(user))
        logger.info("User %s logged in", user.id)
        return user, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: Optional[str]) -> str:
        """Generate new access token from refresh token"""
        if not refresh_token:
            raise AuthenticationError("Missing refresh token")
        try:
            payload = decode_token(refresh_token, refresh=True)
            user_id = int(payload.get("sub"))
        except (AuthenticationError, TypeError, ValueError):
            raise AuthenticationError("Invalid or expired refresh token")

        user = await self.user_repo.get(user_id)
        if not user:
            raise AuthenticationError("Invalid user")
        if not user.active:
            raise AuthorizationError("Account is inactive")

        return create_token(user.id, user.role, **token_claims(user))

    async def get_me(self, user_id) -> User:
        try:
            user = await self.user_repo.get(int(user_id))
        except (TypeError, ValueError):
            user = None
        if not user:
            raise NotFoundError("User", user_id, message="User not found")
        return user

    async def create_user(
        self,
        email: str,
        password: str,
        role: str = Role.agent.value,
        name: str = "",
    ) -> User:
        """Create a new user with hashed password"""
        email = email.strip().lower()
        if await self.user_repo.exists_by_email(email):
            raise ValidationError("Email already registered", field="email")

        valid_roles = [r.value for r in Role]
        if role not in valid_roles:
            raise ValidationError(f"Invalid role. Must be one of: {', '.join(valid_roles)}", field="role")

        return await self.user_repo.create(obj_in={
            "email": email,
            "name": name or email.split("@")[0],
            "password_hash": self._hash_password(password),
            "role": role,
            "active": True,
        })

    async def ensure_admin(self, settings: Optional[Settings] = None) -> Optional[User]:
        """Create the configured admin, or promote / reset it when asked to"""
        s = settings or get_settings()
        email = (s.ADMIN_EMAIL or "").strip().lower()
        if not email:
            logger.warning("ADMIN_EMAIL is empty; skipping admin seed")
            return None

        existing = await self.user_repo.get_by_email(email)
        if existing:
            if existing.role != Role.admin.value:
                if s.ADMIN_FORCE_PROMOTE:
                    existing.role = Role.admin.value
                    logger.info("Promoted existing user %s to admin", email)
                else:
                    logger.info(
                        "User %s exists with role %r; set ADMIN_FORCE_PROMOTE=1 to promote",
                        email, existing.role,
                    )
            if s.ADMIN_RESET_PASSWORD and s.ADMIN_PASSWORD:
                existing.password_hash = self._hash_password(s.ADMIN_PASSWORD)
                logger.info("Password reset for %s", email)
            await self.session.flush()
            return existing

        if not s.ADMIN_PASSWORD:
            logger.warning("ADMIN_PASSWORD is empty; not creating admin %s", email)
            return None

        user = await self.create_user(email, s.ADMIN_PASSWORD, Role.admin.value, s.ADMIN_NAME)
        logger.info("Admin created: %s", email)
        if len(s.ADMIN_PASSWORD) < 10 or s.ADMIN_PASSWORD.lower() in WEAK_PASSWORDS:
            logger.warning("The seeded admin password looks weak; change ADMIN_PASSWORD")
        return user

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt"""
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def _verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except ValueError as e:
            logger.warning("Password verification error: %s", e)
            return False
