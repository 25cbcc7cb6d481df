"""Identity provider services package."""

from pennywise.services.identity.interface import (
    AuthStateCallback,
    IdentityError,
    IdentityProvider,
    SignInError,
    SignOutError,
    Unsubscribe,
)
from pennywise.services.identity.local import LocalIdentityProvider

__all__ = [
    "AuthStateCallback",
    "IdentityError",
    "IdentityProvider",
    "LocalIdentityProvider",
    "SignInError",
    "SignOutError",
    "Unsubscribe",
]
