"""
Identity Session Observer

Holds the process-wide view of who is signed in.

DESIGN DECISION: Instead of reading the provider's global state from
everywhere, the observer subscribes once on start, keeps the latest
identity, and hands it to the flows explicitly. Listeners (the
transaction store) are told about every identity change so they can
drop data that belongs to someone else.
"""

from typing import Callable, Optional

import structlog

from pennywise.models.transaction import Identity
from pennywise.services.identity import IdentityProvider, Unsubscribe


IdentityListener = Callable[[Optional[Identity]], None]


class IdentitySessionObserver:
    """
    Tracks ``current_user`` and ``auth_loading``.

    ``auth_loading`` is True until the provider's first callback and
    False forever after; a missing user simply means "logged out".

    Usage:
        with IdentitySessionObserver(provider) as session:
            ...
    """

    def __init__(self, provider: IdentityProvider):
        self._provider = provider
        self._current_user: Optional[Identity] = None
        self._auth_loading = True
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: list[IdentityListener] = []
        self._logger = structlog.get_logger(__name__)

    @property
    def current_user(self) -> Optional[Identity]:
        return self._current_user

    @property
    def auth_loading(self) -> bool:
        return self._auth_loading

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    @property
    def is_started(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener for identity changes. Returns a remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def start(self) -> "IdentitySessionObserver":
        """Subscribe to the provider. Calling it twice is a no-op."""
        if self._unsubscribe is None:
            self._unsubscribe = self._provider.subscribe(self._on_auth_state_changed)
        return self

    def close(self) -> None:
        """Unsubscribe from the provider. Safe to call more than once."""
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    def __enter__(self) -> "IdentitySessionObserver":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _on_auth_state_changed(self, user: Optional[Identity]) -> None:
        changed = user != self._current_user
        self._current_user = user
        self._auth_loading = False

        if changed:
            self._logger.info(
                "identity_changed",
                email=user.email if user else None,
            )

        for listener in list(self._listeners):
            listener(user)
