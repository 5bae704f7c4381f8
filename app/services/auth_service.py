"""Authentication service resolving identity-provider JWTs into identities."""

from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.models.auth_models import Identity, Role
from app.utils.config import Settings, get_settings
from app.utils.errors import UnauthorizedError


class AuthService:
    """Service for handling authentication operations."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize auth service."""
        settings = settings or get_settings()
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.audience = settings.jwt_audience
        self.issuer = settings.jwt_issuer

    def decode_token(self, token: str) -> Dict[str, Any]:
        """Decode and verify a JWT token."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
            return payload
        except JWTError as e:
            raise UnauthorizedError("Could not validate credentials") from e

    def identity_from_token(self, token: str) -> Identity:
        """
        Map a verified token to the caller identity.

        The ``sub`` claim is required; an unknown ``role`` claim is ignored
        because the stored user record decides the role.
        """
        payload = self.decode_token(token)
        subject = payload.get("sub")
        if not subject or not isinstance(subject, str):
            raise UnauthorizedError("Invalid authentication credentials")

        role_claim = payload.get("role")
        role = Role(role_claim) if role_claim in {r.value for r in Role} else None
        return Identity(
            subject=subject,
            role=role,
            email=payload.get("email"),
            name=payload.get("name"),
        )


# Global auth service instance
auth_service = AuthService()
