"""Request-scoped authorization predicates."""

from dataclasses import dataclass

from eventhub.services.auth.exceptions import ForbiddenError, UnauthorizedError
from eventhub.services.auth.token_signer import SessionClaims, TokenSigner

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class AccessGuard:
    """Answers who the caller is, from verified claims alone.

    Built once per request. Never touches the database.
    """

    claims: SessionClaims | None = None

    @classmethod
    def anonymous(cls) -> "AccessGuard":
        return cls(None)

    @classmethod
    def from_token(cls, token: str | None, signer: TokenSigner) -> "AccessGuard":
        if not token:
            return cls.anonymous()
        return cls(signer.verify(token))

    @classmethod
    def from_authorization_header(cls, header: str | None, signer: TokenSigner) -> "AccessGuard":
        """Build a guard from an ``Authorization: Bearer <token>`` value."""
        if not header or not header.lower().startswith(BEARER_PREFIX):
            return cls.anonymous()
        return cls.from_token(header[len(BEARER_PREFIX):].strip(), signer)

    @property
    def is_authenticated(self) -> bool:
        return self.claims is not None

    @property
    def is_admin(self) -> bool:
        return self.claims is not None and self.claims.is_admin

    @property
    def user_id(self) -> str | None:
        return self.claims.user_id if self.claims else None

    def is_owner_or_admin(self, resource_owner_id: str) -> bool:
        return self.is_admin or (
            self.claims is not None and self.claims.user_id == resource_owner_id
        )

    def require_authenticated(self) -> SessionClaims:
        if self.claims is None:
            raise UnauthorizedError("Not authenticated")
        return self.claims

    def require_admin(self) -> SessionClaims:
        claims = self.require_authenticated()
        if not claims.is_admin:
            raise ForbiddenError("Admin access required")
        return claims

    def require_owner_or_admin(self, resource_owner_id: str) -> SessionClaims:
        claims = self.require_authenticated()
        if not self.is_owner_or_admin(resource_owner_id):
            raise ForbiddenError("Not authorized to modify this resource")
        return claims
