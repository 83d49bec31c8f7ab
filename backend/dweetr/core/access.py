# dweetr/core/access.py

import secrets
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from sqlalchemy import and_, or_

from dweetr.models.dweet import Dweet

PRIVATE_KEY = "private"
AUTH_KEY = "auth"
RESERVED_KEYS = (PRIVATE_KEY, AUTH_KEY)

TOKEN_BYTES = 16


@dataclass(frozen=True)
class ControlFields:
    is_private: bool = False
    auth_token: Optional[str] = None


def split_control_fields(raw: Mapping[str, str]) -> Tuple[ControlFields, Dict[str, str]]:
    """
    Pull the reserved ``private``/``auth`` keys out of a publish request.

    Only ``private=1`` turns a dweet private. ``auth`` is always dropped so a
    publisher can never attach a token of their choosing to stored data.
    """
    control = ControlFields(
        is_private=str(raw.get(PRIVATE_KEY, "")) == "1",
        auth_token=raw.get(AUTH_KEY) or None,
    )
    payload = {k: v for k, v in raw.items() if k not in RESERVED_KEYS}
    return control, payload


def generate_token() -> str:
    """128 bits from the OS CSPRNG; unrelated to the payload it guards."""
    return secrets.token_hex(TOKEN_BYTES)


@dataclass(frozen=True)
class VisibilityFilter:
    """Which dweets a reader may see: public ones, plus private ones with their exact token."""

    token: Optional[str] = None

    @classmethod
    def for_token(cls, token: Optional[str]) -> "VisibilityFilter":
        # An empty token is treated exactly like no token
        return cls(token=token or None)

    @property
    def public_only(self) -> bool:
        return self.token is None

    def clause(self):
        if self.public_only:
            return Dweet.is_private.is_(False)
        return or_(
            Dweet.is_private.is_(False),
            and_(Dweet.is_private.is_(True), Dweet.token == self.token),
        )
