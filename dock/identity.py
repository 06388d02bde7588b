"""Identity providers: bearer credential in, stable user id out."""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from typing import Protocol

from .errors import AuthenticationError
from .secrets import SecretsProvider, resolve_secrets

BEARER_SCHEME = "bearer"


class IdentityProvider(Protocol):
    def authenticate(self, credential: str | None) -> str:
        """Return the user id for ``credential`` or raise AuthenticationError."""
        ...


def strip_bearer(credential: str | None) -> str | None:
    """Accept either a raw token or an ``Authorization: Bearer`` value."""
    if not credential:
        return None
    scheme, _, rest = credential.strip().partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        return rest.strip() or None
    return credential.strip() or None


class TokenIdentityProvider:
    """Maps user ids to token secret references.

    Tokens are resolved once at construction and compared in constant time.
    """

    def __init__(self, identities: Mapping[str, str], secrets: SecretsProvider | None = None):
        self._tokens = resolve_secrets(identities, secrets)

    def authenticate(self, credential: str | None) -> str:
        token = strip_bearer(credential)
        if token is None:
            raise AuthenticationError("Missing auth token")
        for user_id, expected in self._tokens.items():
            if hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
                return user_id
        raise AuthenticationError("Invalid auth token")
