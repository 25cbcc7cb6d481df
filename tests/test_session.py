"""Tests for the identity session observer and the local identity provider."""

from unittest.mock import MagicMock

import pytest

from pennywise.services.identity import LocalIdentityProvider, SignInError
from pennywise.session import IdentitySessionObserver
from tests.helpers import ALICE, run


class TestIdentitySessionObserver:
    """Tests for IdentitySessionObserver."""

    def test_auth_loading_until_first_callback(self):
        provider = MagicMock()
        session = IdentitySessionObserver(provider)

        assert session.auth_loading
        assert session.current_user is None

        session.start()
        callback = provider.subscribe.call_args.args[0]
        callback(None)

        assert not session.auth_loading
        assert not session.is_authenticated

    def test_tracks_provider_identity(self):
        provider = LocalIdentityProvider(initial=ALICE)
        with IdentitySessionObserver(provider) as session:
            assert session.current_user == ALICE
            assert session.is_authenticated

            run(provider.sign_out())
            assert session.current_user is None
            assert not session.auth_loading

    def test_start_is_idempotent(self):
        provider = MagicMock()
        session = IdentitySessionObserver(provider)
        session.start()
        session.start()
        provider.subscribe.assert_called_once()

    def test_close_unsubscribes_once(self):
        provider = MagicMock()
        unsubscribe = MagicMock()
        provider.subscribe.return_value = unsubscribe

        session = IdentitySessionObserver(provider).start()
        assert session.is_started
        session.close()
        session.close()

        unsubscribe.assert_called_once_with()
        assert not session.is_started

    def test_no_updates_after_close(self):
        provider = LocalIdentityProvider()
        session = IdentitySessionObserver(provider).start()
        session.close()

        run(provider.sign_in("a@x.com"))
        assert session.current_user is None

    def test_listeners_receive_every_callback(self):
        provider = LocalIdentityProvider()
        session = IdentitySessionObserver(provider)
        seen = []
        session.add_listener(seen.append)
        session.start()

        identity = run(provider.sign_in("a@x.com"))
        run(provider.sign_out())

        assert seen == [None, identity, None]

    def test_removed_listener_is_not_called(self):
        provider = LocalIdentityProvider()
        session = IdentitySessionObserver(provider).start()
        listener = MagicMock()
        remove = session.add_listener(listener)
        remove()
        remove()

        run(provider.sign_in("a@x.com"))
        listener.assert_not_called()


class TestLocalIdentityProvider:
    """Tests for LocalIdentityProvider."""

    def test_sign_in_normalizes_email(self):
        provider = LocalIdentityProvider()
        identity = run(provider.sign_in("  A@X.com "))
        assert identity.email == "a@x.com"
        assert provider.current_user == identity

    def test_same_email_same_uid(self):
        first = run(LocalIdentityProvider().sign_in("a@x.com"))
        second = run(LocalIdentityProvider().sign_in("A@x.com"))
        assert first == second

    @pytest.mark.parametrize("email", ["", "not-an-email", "a@b", None])
    def test_sign_in_rejects_invalid_email(self, email):
        provider = LocalIdentityProvider()
        with pytest.raises(SignInError):
            run(provider.sign_in(email))
        assert provider.current_user is None

    def test_subscribe_reports_current_state(self):
        provider = LocalIdentityProvider(initial=ALICE)
        callback = MagicMock()
        provider.subscribe(callback)
        callback.assert_called_once_with(ALICE)
