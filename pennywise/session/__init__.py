"""Session package."""

from pennywise.session.observer import IdentityListener, IdentitySessionObserver

__all__ = ["IdentityListener", "IdentitySessionObserver"]
