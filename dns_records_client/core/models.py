"""
Data model for the DNS records client.

Server-owned entities are parsed from response bodies that may use either
PascalCase or camelCase keys; requests are always built with the keys the
backend documents.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


ROLE_USER = "user"
ROLE_ADMIN = "admin"


def _numeric_date(value: Any) -> Optional[int]:
    """JWT NumericDate claims must be JSON numbers."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"date claim must be a number, got {type(value).__name__}")
    return int(value)


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in a response body."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token, always held together."""

    access_token: str
    refresh_token: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TokenPair":
        return cls(
            access_token=_pick(data, "AccessToken", "accessToken", default=""),
            refresh_token=_pick(data, "RefreshToken", "refreshToken", default=""),
        )


@dataclass(frozen=True)
class DecodedClaims:
    subject: str
    user_id: int
    role: str
    issued_at: Optional[int]
    expires_at: Optional[int]

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "DecodedClaims":
        user_id = _pick(claims, "UserID", "user_id")
        return cls(
            subject=claims.get("sub", ""),
            user_id=int(user_id) if user_id is not None else 0,
            role=_pick(claims, "Role", "role", default=ROLE_USER),
            issued_at=_numeric_date(claims.get("iat")),
            expires_at=_numeric_date(claims.get("exp")),
        )

    def is_expired(self, now: float) -> bool:
        """Compare expiry on a millisecond clock; no expiry means expired."""
        if not self.expires_at:
            return True
        return self.expires_at * 1000 < now * 1000


@dataclass(frozen=True)
class Identity:
    """The signed-in user, derived from access token claims."""

    id: int
    username: str
    role: str
    enabled: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_claims(cls, claims: DecodedClaims) -> "Identity":
        # The access token carries no enabled flag.
        return cls(id=claims.user_id, username=claims.subject, role=claims.role)


@dataclass(frozen=True)
class DNSRecord:
    id: int
    owner_user_id: int
    domain_name: str
    record_type: str
    value: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    owner_username: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DNSRecord":
        return cls(
            id=int(_pick(data, "ID", "id", default=0)),
            owner_user_id=int(_pick(data, "UserID", "userId", default=0)),
            domain_name=_pick(data, "DomainName", "domainName", default=""),
            record_type=_pick(data, "Type", "type", default=""),
            value=_pick(data, "Value", "value", default=""),
            created_at=_pick(data, "CreatedAt", "createdAt"),
            updated_at=_pick(data, "UpdatedAt", "updatedAt"),
            owner_username=_pick(data, "Username", "username"),
        )

    def to_form(self) -> Dict[str, str]:
        """Fields shown in the edit form."""
        return {
            "DomainName": self.domain_name,
            "Type": self.record_type,
            "Value": self.value,
        }


@dataclass(frozen=True)
class ManagedUser:
    id: int
    username: str
    role: str
    enabled: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ManagedUser":
        return cls(
            id=int(_pick(data, "ID", "id", default=0)),
            username=_pick(data, "Username", "username", default=""),
            role=_pick(data, "Role", "role", default=ROLE_USER),
            enabled=bool(_pick(data, "IsEnabled", "isEnabled", default=False)),
            created_at=_pick(data, "CreatedAt", "createdAt"),
            updated_at=_pick(data, "UpdatedAt", "updatedAt"),
        )


@dataclass
class Page:
    """One page of a remote collection and the server-reported total."""

    items: List[Any] = field(default_factory=list)
    total_count: int = 0
