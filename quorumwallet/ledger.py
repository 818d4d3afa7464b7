"""
QuorumWallet Transaction Ledger

Append-only store of proposed actions keyed by a dense monotonic id. Each
Transaction owns its confirmation tracker: the set of owners that currently
approve it. Records are never deleted; the ledger is the permanent history of
every action the owners ever proposed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from .errors import NotFound


class TransactionStatus(str, Enum):
    """
    Per-transaction state.

    SUBMITTED: confirmations below threshold
    CONFIRMED_PENDING: threshold met, not executed (new or after a failed attempt)
    EXECUTED: action succeeded (terminal)
    """
    SUBMITTED = "SUBMITTED"
    CONFIRMED_PENDING = "CONFIRMED_PENDING"
    EXECUTED = "EXECUTED"


@dataclass
class Transaction:
    """A proposed destination/value/payload action."""
    id: int
    destination: Any
    value: int
    payload: bytes = b""
    executed: bool = False
    confirmations: Set[Any] = field(default_factory=set)

    def is_confirmed_by(self, owner: Any) -> bool:
        return owner in self.confirmations

    def to_dict(self, owner_order: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
        if owner_order is None:
            confirmed = sorted(self.confirmations, key=repr)
        else:
            confirmed = [o for o in owner_order if o in self.confirmations]
        return {
            "id": self.id,
            "destination": self.destination,
            "value": self.value,
            "payload_hex": self.payload.hex(),
            "executed": self.executed,
            "confirmations": confirmed,
        }


class TransactionLedger:
    """
    Dense, append-only transaction store.

    Existence is decided by the id range alone, so a transaction with a null
    destination is as real as any other.
    """

    def __init__(self):
        self._transactions: List[Transaction] = []

    @property
    def transaction_count(self) -> int:
        return len(self._transactions)

    def exists(self, transaction_id: Any) -> bool:
        if isinstance(transaction_id, bool) or not isinstance(transaction_id, int):
            return False
        return 0 <= transaction_id < len(self._transactions)

    def append(self, destination: Any, value: int, payload: bytes) -> Transaction:
        tx = Transaction(
            id=len(self._transactions),
            destination=destination,
            value=value,
            payload=payload,
        )
        self._transactions.append(tx)
        return tx

    def get(self, transaction_id: Any) -> Transaction:
        if not self.exists(transaction_id):
            raise NotFound(
                f"Transaction {transaction_id!r} does not exist",
                transaction_id=transaction_id if isinstance(transaction_id, int) else None
            )
        return self._transactions[transaction_id]

    def select(
        self,
        start: int = 0,
        end: Optional[int] = None,
        pending: bool = True,
        executed: bool = True
    ) -> List[int]:
        """Ids in [start, end) filtered by executed state."""
        count = len(self._transactions)
        end = count if end is None else max(0, min(end, count))
        start = max(0, min(start, count))
        ids = []
        for tx in self._transactions[start:end]:
            if (pending and not tx.executed) or (executed and tx.executed):
                ids.append(tx.id)
        return ids
