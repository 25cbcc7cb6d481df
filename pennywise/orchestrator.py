"""
Main Orchestrator for PennyWise

This module ties together all the components and defines the
end-to-end flows for:
1. Sync (identity → refresh store)
2. Add transaction (intent → gateway → confirmed → local patch)
3. Delete transaction (intent → gateway → confirmed → local patch)
4. Sign in / sign out

DESIGN DECISION: The orchestrator enforces the boundaries:
- Local state changes only after the data service confirms
- Every failure is caught HERE, at the user action, and becomes
  a notification plus an audit event; nothing propagates further
- Every step is audited

This is the "glue" that keeps the store consistent even when the
data service behaves unexpectedly.
"""

from typing import Optional, Union
from uuid import UUID

import structlog

from pennywise.audit import AuditLogger, create_correlation_id
from pennywise.config import get_settings
from pennywise.gateway import (
    InvalidTransactionIdError,
    RemoteMalformedError,
    RemoteRejectionError,
    TransactionError,
    TransactionGateway,
    UnauthenticatedError,
    coerce_transaction_id,
)
from pennywise.models.notification import NotificationBuilder
from pennywise.models.transaction import Identity, NewTransaction, Transaction
from pennywise.services.identity import IdentityProvider, LocalIdentityProvider
from pennywise.services.notifications import (
    Navigator,
    NotificationQueue,
    NotificationSink,
    RouteState,
)
from pennywise.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsTransactionService,
    InMemoryTransactionService,
    TransactionDataService,
)
from pennywise.session import IdentitySessionObserver
from pennywise.store import TransactionStore


logger = structlog.get_logger(__name__)


class TransactionFlow:
    """
    Orchestrates everything the user does with transactions.

    The current identity is always read from the session observer at
    the moment of the action and passed down explicitly.
    """

    def __init__(
        self,
        session: IdentitySessionObserver,
        store: TransactionStore,
        gateway: TransactionGateway,
        notifier: NotificationSink,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session = session
        self._store = store
        self._gateway = gateway
        self._notifier = notifier
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger(__name__)

    @property
    def session(self) -> IdentitySessionObserver:
        return self._session

    @property
    def store(self) -> TransactionStore:
        return self._store

    async def sync(self, correlation_id: Optional[UUID] = None) -> None:
        """
        Bring the store in line with the session.

        - Still waiting for the provider: do nothing
        - Nobody signed in: empty store, not loading
        - Signed in and not yet loaded for this user: refresh
        """
        if self._session.auth_loading:
            return

        user = self._session.current_user
        if user is None:
            self._store.clear()
        elif self._store.needs_refresh(user):
            await self._store.refresh(user, correlation_id=correlation_id)

    async def reload(self, correlation_id: Optional[UUID] = None) -> None:
        """Force a fresh fetch for the current user."""
        await self._store.refresh(
            self._session.current_user,
            correlation_id=correlation_id,
        )

    async def add_transaction(
        self,
        payload: NewTransaction,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Transaction]:
        """
        Record a new transaction.

        Returns:
            The confirmed transaction, or None if anything went wrong
            (the user has already been notified).
        """
        correlation_id = correlation_id or create_correlation_id()
        user = self._session.current_user
        email = user.email if user else None

        try:
            transaction = await self._gateway.add(user, payload)
        except UnauthenticatedError:
            self._notifier.notify(NotificationBuilder.add_unauthenticated())
            if self._audit_logger:
                await self._audit_logger.log_unauthenticated_action(
                    action="add_transaction",
                    correlation_id=correlation_id,
                )
            return None
        except RemoteRejectionError as e:
            self._logger.error("add_transaction_rejected", error=e.detail)
            self._notifier.notify(NotificationBuilder.add_failed(e.detail))
            await self._audit_add_failed(email, "rejected", e.detail, correlation_id)
            return None
        except TransactionError as e:
            self._logger.error(
                "add_transaction_failed",
                error=str(e),
                error_kind=type(e).__name__,
            )
            self._notifier.notify(NotificationBuilder.add_failed_unknown())
            await self._audit_add_failed(email, type(e).__name__, str(e), correlation_id)
            return None

        self._store.insert(transaction)
        self._notifier.notify(NotificationBuilder.transaction_added())

        if self._audit_logger:
            await self._audit_logger.log_transaction_added(
                transaction_id=transaction.id,
                user_email=transaction.user_email,
                amount=transaction.amount,
                correlation_id=correlation_id,
            )

        return transaction

    async def _audit_add_failed(
        self,
        email: Optional[str],
        reason: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_add_failed(
                user_email=email,
                reason=reason,
                error_message=error_message,
                correlation_id=correlation_id,
            )

    async def delete_transaction(
        self,
        transaction_id: Union[str, int, float],
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete a transaction by id.

        Returns:
            True if the data service confirmed the delete.
        """
        correlation_id = correlation_id or create_correlation_id()
        user = self._session.current_user
        email = user.email if user else None

        try:
            deleted_id = await self._gateway.delete(user, transaction_id)
        except UnauthenticatedError:
            self._notifier.notify(NotificationBuilder.delete_unauthenticated())
            if self._audit_logger:
                await self._audit_logger.log_unauthenticated_action(
                    action="delete_transaction",
                    correlation_id=correlation_id,
                )
            return False
        except InvalidTransactionIdError as e:
            self._notifier.notify(NotificationBuilder.invalid_transaction_id())
            if self._audit_logger:
                await self._audit_logger.log_invalid_transaction_id(
                    raw_id=e.raw_id,
                    user_email=email,
                    correlation_id=correlation_id,
                )
            return False
        except RemoteRejectionError as e:
            self._logger.error("delete_transaction_rejected", error=e.detail)
            self._notifier.notify(NotificationBuilder.delete_failed(e.detail))
            await self._audit_delete_failed(
                transaction_id, email, "rejected", e.detail, correlation_id
            )
            return False
        except TransactionError as e:
            self._logger.error(
                "delete_transaction_failed",
                error=str(e),
                error_kind=type(e).__name__,
            )
            if isinstance(e, RemoteMalformedError):
                self._notifier.notify(NotificationBuilder.delete_failed_unknown())
            else:
                self._notifier.notify(NotificationBuilder.delete_error())
            await self._audit_delete_failed(
                transaction_id, email, type(e).__name__, str(e), correlation_id
            )
            return False

        self._store.remove(deleted_id)
        self._notifier.notify(NotificationBuilder.transaction_deleted())

        if self._audit_logger:
            await self._audit_logger.log_transaction_deleted(
                transaction_id=deleted_id,
                user_email=email,
                correlation_id=correlation_id,
            )

        return True

    async def _audit_delete_failed(
        self,
        transaction_id: Union[str, int, float],
        email: Optional[str],
        reason: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_delete_failed(
                transaction_id=coerce_transaction_id(transaction_id),
                user_email=email,
                reason=reason,
                error_message=error_message,
                correlation_id=correlation_id,
            )


class SessionFlow:
    """
    Orchestrates signing in and out.

    Sign-out does NOT clear the transaction store itself: the provider's
    callback reaches the session observer, whose listener clears it.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        session: IdentitySessionObserver,
        notifier: NotificationSink,
        navigator: Navigator,
        audit_logger: Optional[AuditLogger] = None,
        login_path: Optional[str] = None,
    ):
        self._provider = provider
        self._session = session
        self._notifier = notifier
        self._navigator = navigator
        self._audit_logger = audit_logger
        self._login_path = login_path or get_settings().app.login_path
        self._logger = structlog.get_logger(__name__)

    @property
    def session(self) -> IdentitySessionObserver:
        return self._session

    async def login(
        self,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Identity]:
        """Sign in through the provider. Returns the identity, or None on failure."""
        correlation_id = correlation_id or create_correlation_id()
        try:
            identity = await self._provider.sign_in(email)
        except Exception as e:
            self._logger.error("sign_in_failed", error=str(e))
            self._notifier.notify(NotificationBuilder.sign_in_failed(str(e)))
            return None

        self._notifier.notify(NotificationBuilder.signed_in(identity.email or identity.uid))
        if self._audit_logger and identity.email:
            await self._audit_logger.log_user_signed_in(
                user_email=identity.email,
                correlation_id=correlation_id,
            )
        return identity

    async def logout(self, correlation_id: Optional[UUID] = None) -> bool:
        """
        Sign out through the provider.

        Success: confirmation notification, then navigate to the login view.
        Failure: error notification carrying the provider's message.
        """
        correlation_id = correlation_id or create_correlation_id()
        user = self._session.current_user
        email = user.email if user else None

        try:
            await self._provider.sign_out()
        except Exception as e:
            self._logger.error("sign_out_failed", error=str(e))
            self._notifier.notify(NotificationBuilder.sign_out_failed(str(e)))
            if self._audit_logger:
                await self._audit_logger.log_sign_out_failed(
                    user_email=email,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return False

        self._notifier.notify(NotificationBuilder.signed_out())
        self._navigator.go_to(self._login_path)

        if self._audit_logger:
            await self._audit_logger.log_user_signed_out(
                user_email=email,
                correlation_id=correlation_id,
            )
        return True


def create_app_components(
    use_storage: bool = True,
    provider: Optional[IdentityProvider] = None,
    notifier: Optional[NotificationSink] = None,
    navigator: Optional[Navigator] = None,
    data_service: Optional[TransactionDataService] = None,
) -> tuple[TransactionFlow, SessionFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False for testing without storage.
        provider: Identity provider (defaults to a LocalIdentityProvider)
        notifier: Where notifications go (defaults to a NotificationQueue)
        navigator: Route changes (defaults to RouteState)
        data_service: Overrides the transaction backend entirely

    Returns:
        (transaction_flow, session_flow, sheets_client)

    The session observer is started and the store is already listening
    to it; call ``session_flow.session.close()`` on shutdown.
    """
    app_settings = get_settings().app
    sheets_client = None
    audit_logger = None

    if data_service is None and use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            data_service = GoogleSheetsTransactionService(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            data_service = None

    if data_service is None:
        data_service = InMemoryTransactionService()
    if audit_logger is None:
        audit_logger = AuditLogger()  # Local-only logging

    provider = provider or LocalIdentityProvider()
    notifier = notifier or NotificationQueue()
    navigator = navigator or RouteState()

    gateway = TransactionGateway(
        data_service,
        timeout_seconds=app_settings.remote_timeout_seconds,
    )
    store = TransactionStore(gateway, notifier, audit_logger)
    session = IdentitySessionObserver(provider)
    session.add_listener(store.on_identity_changed)
    session.start()

    transaction_flow = TransactionFlow(
        session=session,
        store=store,
        gateway=gateway,
        notifier=notifier,
        audit_logger=audit_logger,
    )
    session_flow = SessionFlow(
        provider=provider,
        session=session,
        notifier=notifier,
        navigator=navigator,
        audit_logger=audit_logger,
        login_path=app_settings.login_path,
    )

    return transaction_flow, session_flow, sheets_client
