"""
Abstract Identity Provider Interface

DESIGN DECISION: Authentication is delegated to an external provider.
PennyWise only needs three things from it:
1. Tell us whenever the signed-in identity changes
2. Sign the user in
3. Sign the user out

Everything else (passwords, tokens, account recovery) is the
provider's business.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from pennywise.models.transaction import Identity


AuthStateCallback = Callable[[Optional[Identity]], None]
Unsubscribe = Callable[[], None]


class IdentityProvider(ABC):
    """Abstract interface for the authentication provider."""

    @abstractmethod
    def subscribe(self, callback: AuthStateCallback) -> Unsubscribe:
        """
        Register for authentication state changes.

        The callback receives the current identity, or None when nobody
        is signed in. Providers call it once right after subscribing with
        the current state, then on every change.

        Returns:
            A function that cancels the subscription
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str) -> Identity:
        """
        Sign a user in.

        Raises:
            SignInError: If the provider refuses the sign-in
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """
        Sign the current user out.

        Raises:
            SignOutError: If the provider can't complete the sign-out
        """
        pass


class IdentityError(Exception):
    """Base exception for identity provider operations."""
    pass


class SignInError(IdentityError):
    """The provider refused the sign-in."""
    pass


class SignOutError(IdentityError):
    """The provider couldn't sign the user out."""
    pass
