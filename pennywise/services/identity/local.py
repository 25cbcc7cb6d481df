"""
Local Identity Provider

An in-process provider for development, tests and single-user installs.
It trusts the email it's given: there is no password check, because
real authentication belongs to a hosted provider behind the same interface.
"""

import re
from typing import Optional
from uuid import NAMESPACE_URL, uuid5

import structlog

from pennywise.models.transaction import Identity
from pennywise.services.identity.interface import (
    AuthStateCallback,
    IdentityProvider,
    SignInError,
    Unsubscribe,
)


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class LocalIdentityProvider(IdentityProvider):
    """
    Keeps the signed-in identity in memory and notifies subscribers.

    Subscribers are called synchronously, in subscription order.
    """

    def __init__(self, initial: Optional[Identity] = None):
        self._current: Optional[Identity] = initial
        self._subscribers: list[AuthStateCallback] = []
        self._logger = structlog.get_logger(__name__)

    @property
    def current_user(self) -> Optional[Identity]:
        return self._current

    def subscribe(self, callback: AuthStateCallback) -> Unsubscribe:
        self._subscribers.append(callback)
        callback(self._current)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self) -> None:
        for callback in list(self._subscribers):
            callback(self._current)

    async def sign_in(self, email: str) -> Identity:
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise SignInError(f"Not a valid email address: {email!r}")

        identity = Identity(
            uid=str(uuid5(NAMESPACE_URL, f"mailto:{email}")),
            email=email,
        )
        self._current = identity
        self._logger.info("identity_signed_in", email=email)
        self._emit()
        return identity

    async def sign_out(self) -> None:
        previous = self._current
        self._current = None
        self._logger.info(
            "identity_signed_out",
            email=previous.email if previous else None,
        )
        self._emit()
