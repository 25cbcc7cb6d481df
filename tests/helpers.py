"""Helpers shared by the PennyWise test modules."""

import asyncio

from pennywise.models.transaction import Identity


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


ALICE = Identity(uid="uid-alice", email="a@x.com")
BOB = Identity(uid="uid-bob", email="b@x.com")


def sample_records() -> list[dict]:
    """Two transactions for a@x.com and one for b@x.com, as the remote returns them."""
    return [
        {
            "id": 1,
            "userEmail": "a@x.com",
            "amount": 100,
            "date": "2024-01-01T00:00:00.000Z",
            "description": "Salary",
            "category": "salary",
        },
        {
            "id": 2,
            "userEmail": "a@x.com",
            "amount": -30,
            "date": "2024-01-02T00:00:00.000Z",
            "description": "Groceries",
            "category": "food",
        },
        {
            "id": 7,
            "userEmail": "b@x.com",
            "amount": 5,
            "date": "2024-01-03T00:00:00.000Z",
            "description": "Gift",
            "category": "gift",
        },
    ]
