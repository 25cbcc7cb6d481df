"""
Transaction Mutation Gateway

DESIGN DECISION: The gateway is the ONLY place that talks to the
data service. It translates local intents (list, add, delete) into
remote calls and turns every remote response into either:
- a fully-typed value (list of records, Transaction, deleted id), or
- one exception from the taxonomy below.

Shape checks and type coercion happen here, once. Nothing deeper in
the call graph ever sees a raw remote dictionary.

ERROR TAXONOMY:
    TransactionError
    ├── UnauthenticatedError       no signed-in identity / no email
    ├── InvalidTransactionIdError  id isn't a number
    ├── RemoteRejectionError       remote returned an explicit error
    ├── RemoteMalformedError       remote returned neither shape
    ├── DataFormatError            list() didn't return a sequence
    └── TransportError             the call itself raised or timed out

The gateway never touches the store and never notifies the user.
Callers decide what each outcome means for local state.
"""

import asyncio
import math
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from pennywise.models.transaction import Identity, NewTransaction, Transaction
from pennywise.services.storage import TransactionDataService


class TransactionError(Exception):
    """Base exception for transaction gateway errors."""
    pass


class UnauthenticatedError(TransactionError):
    """The action needs a signed-in identity with an email."""
    pass


class InvalidTransactionIdError(TransactionError):
    """The identifier supplied for a delete isn't a number."""

    def __init__(self, raw_id: Any):
        self.raw_id = raw_id
        super().__init__(f"Invalid transaction id: {raw_id!r}")


class RemoteRejectionError(TransactionError):
    """The data service answered with an explicit error."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class RemoteMalformedError(TransactionError):
    """The data service answered with something we don't recognise."""

    def __init__(self, message: str, response: Any = None):
        self.response = response
        super().__init__(message)


class DataFormatError(TransactionError):
    """The list call didn't return a sequence of records."""

    def __init__(self, received: Any):
        self.received_type = type(received).__name__
        super().__init__(f"Expected a list of transactions, got {self.received_type}")


class TransportError(TransactionError):
    """The remote call raised or timed out."""
    pass


def require_email(user: Optional[Identity]) -> str:
    """Return the identity's email or raise UnauthenticatedError."""
    if user is None or not user.has_email:
        raise UnauthenticatedError("A signed-in user with an email is required")
    return user.email


def coerce_transaction_id(raw_id: Union[str, int, float, None]) -> int:
    """
    Turn an identifier from the UI into an integer.

    Accepts ints, integral floats and numeric strings ("12", " 12 ",
    "12.0"). Anything else raises InvalidTransactionIdError.
    """
    if isinstance(raw_id, bool) or raw_id is None:
        raise InvalidTransactionIdError(raw_id)
    if isinstance(raw_id, int):
        return raw_id

    if isinstance(raw_id, str):
        text = raw_id.strip()
        if not text:
            raise InvalidTransactionIdError(raw_id)
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            raise InvalidTransactionIdError(raw_id)
    elif isinstance(raw_id, float):
        value = raw_id
    else:
        raise InvalidTransactionIdError(raw_id)

    if not math.isfinite(value) or not value.is_integer():
        raise InvalidTransactionIdError(raw_id)
    return int(value)


class TransactionGateway:
    """
    Boundary between PennyWise and the transaction data service.

    GUARANTEES:
    - No remote call without a signed-in identity (add/delete)
    - No remote call with a non-numeric id (delete)
    - Every response is classified; raw dictionaries never leak out
    - Every remote call is bounded by ``timeout_seconds`` when set
    """

    def __init__(
        self,
        service: TransactionDataService,
        timeout_seconds: Optional[float] = None,
    ):
        self._service = service
        self._timeout = timeout_seconds

    async def _call(self, operation: str, awaitable) -> Any:
        """Await a remote call, turning any failure into TransportError."""
        try:
            if self._timeout:
                return await asyncio.wait_for(awaitable, timeout=self._timeout)
            return await awaitable
        except asyncio.TimeoutError:
            raise TransportError(
                f"{operation} timed out after {self._timeout:g}s"
            )
        except Exception as e:
            raise TransportError(f"{operation} failed: {e}") from e

    async def list_records(self) -> list:
        """
        Fetch every record from the data service, unfiltered.

        Only the outer shape is checked here; the store filters by owner
        and coerces each record.

        Raises:
            DataFormatError: The result isn't a list/tuple
            TransportError: The call raised or timed out
        """
        result = await self._call("list", self._service.list())
        if not isinstance(result, (list, tuple)):
            raise DataFormatError(result)
        return list(result)

    async def add(
        self,
        user: Optional[Identity],
        payload: NewTransaction,
    ) -> Transaction:
        """
        Create a transaction for ``user``.

        Returns:
            The confirmed Transaction carrying the remote-assigned id

        Raises:
            UnauthenticatedError: No identity or no email (no remote call)
            RemoteRejectionError: Remote answered {"error": ...}
            RemoteMalformedError: Remote answered something else
            TransportError: The call raised or timed out
        """
        email = require_email(user)
        body = payload.to_create_payload(email)

        result = await self._call("create", self._service.create(body))
        return self._parse_create_result(result, body, email)

    @staticmethod
    def _parse_create_result(result: Any, body: dict, email: str) -> Transaction:
        if not isinstance(result, Mapping):
            raise RemoteMalformedError("Unexpected create response", result)

        if "id" in result:
            # Fields the remote doesn't echo back come from what we sent
            record = {**body, **result}
            try:
                transaction = Transaction.from_remote(record)
            except ValidationError as e:
                raise RemoteMalformedError(
                    f"Created record failed validation: {e.error_count()} errors",
                    result,
                )
            if transaction.user_email != email:
                raise RemoteMalformedError(
                    "Created record belongs to a different user",
                    result,
                )
            return transaction

        if "error" in result:
            raise RemoteRejectionError(str(result["error"]))

        raise RemoteMalformedError("Unexpected create response", result)

    async def delete(
        self,
        user: Optional[Identity],
        transaction_id: Union[str, int, float],
    ) -> int:
        """
        Delete a transaction owned by ``user``.

        Returns:
            The numeric id that was deleted

        Raises:
            UnauthenticatedError: No identity or no email (no remote call)
            InvalidTransactionIdError: Id isn't a number (no remote call)
            RemoteRejectionError: Remote answered {"success": false, "error": ...}
            RemoteMalformedError: Remote answered something else
            TransportError: The call raised or timed out
        """
        email = require_email(user)
        numeric_id = coerce_transaction_id(transaction_id)

        result = await self._call(
            "delete",
            self._service.delete(numeric_id, email),
        )

        if isinstance(result, Mapping):
            if result.get("success"):
                return numeric_id
            if result.get("error"):
                raise RemoteRejectionError(str(result["error"]))

        raise RemoteMalformedError("Unexpected delete response", result)
