"""Transaction gateway package."""

from pennywise.gateway.transaction_gateway import (
    DataFormatError,
    InvalidTransactionIdError,
    RemoteMalformedError,
    RemoteRejectionError,
    TransactionError,
    TransactionGateway,
    TransportError,
    UnauthenticatedError,
    coerce_transaction_id,
    require_email,
)

__all__ = [
    "DataFormatError",
    "InvalidTransactionIdError",
    "RemoteMalformedError",
    "RemoteRejectionError",
    "TransactionError",
    "TransactionGateway",
    "TransportError",
    "UnauthenticatedError",
    "coerce_transaction_id",
    "require_email",
]
