"""Transaction store package."""

from pennywise.store.transaction_store import TransactionStore, sort_by_date_desc

__all__ = ["TransactionStore", "sort_by_date_desc"]
