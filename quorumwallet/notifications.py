"""
QuorumWallet Notifications

Every state transition of the wallet is announced by an append-only
notification correlated by transaction id and, where relevant, owner:

    Submission(id)
    Confirmation(owner, id)
    Revocation(owner, id)
    Execution(id)
    ExecutionFailure(id)

Entries are hash-chained so an exported log can be checked for tampering
without access to the wallet that produced it.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .hashing import chain_entry_hash, payload_hash

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    SUBMISSION = "Submission"
    CONFIRMATION = "Confirmation"
    REVOCATION = "Revocation"
    EXECUTION = "Execution"
    EXECUTION_FAILURE = "ExecutionFailure"


def _identity(owner: Any) -> Any:
    if owner is None or isinstance(owner, (str, int, bool)):
        return owner
    return str(owner)


@dataclass
class Notification:
    """Immutable record of one emitted notification."""
    seq: int
    kind: NotificationType
    transaction_id: int
    owner: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    prev_hash: Optional[str] = None
    entry_hash: Optional[str] = None

    def body(self) -> Dict[str, Any]:
        """Fields covered by the payload hash."""
        return {
            "seq": self.seq,
            "kind": self.kind.value,
            "transaction_id": self.transaction_id,
            "owner": _identity(self.owner),
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }

    def to_dict(self) -> Dict[str, Any]:
        d = self.body()
        d["payload_hash"] = payload_hash(d)
        d["prev_hash"] = self.prev_hash
        d["entry_hash"] = self.entry_hash
        return d


class NotificationLog(ABC):
    """
    Abstract interface for the notification sink.

    Implementations must be append-only and preserve emission order.
    """

    @abstractmethod
    def emit(self, kind: NotificationType, transaction_id: int, owner: Any = None) -> Notification:
        """Append a notification and return the stored entry."""
        pass

    @abstractmethod
    def query(
        self,
        kind: Optional[NotificationType] = None,
        transaction_id: Optional[int] = None,
        owner: Any = None
    ) -> List[Notification]:
        pass


class InMemoryNotificationLog(NotificationLog):
    """
    In-memory, hash-chained notification log.

    Subscribers registered with subscribe() are called synchronously after
    each entry is appended. A failing subscriber is logged and skipped; it
    never affects the wallet operation that emitted the notification.
    """

    def __init__(self):
        self._entries: List[Notification] = []
        self._subscribers: List[Callable[[Notification], None]] = []
        self._lock = threading.Lock()

    def emit(self, kind: NotificationType, transaction_id: int, owner: Any = None) -> Notification:
        with self._lock:
            prev = self._entries[-1].entry_hash if self._entries else None
            entry = Notification(
                seq=len(self._entries),
                kind=kind,
                transaction_id=transaction_id,
                owner=owner,
                prev_hash=prev,
            )
            entry.entry_hash = chain_entry_hash(prev, payload_hash(entry.body()))
            self._entries.append(entry)
            subscribers = self._subscribers[:]

        for callback in subscribers:
            try:
                callback(entry)
            except Exception:
                logger.exception("Notification subscriber failed for %s(%s)", kind.value, transaction_id)
        return entry

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def query(
        self,
        kind: Optional[NotificationType] = None,
        transaction_id: Optional[int] = None,
        owner: Any = None
    ) -> List[Notification]:
        with self._lock:
            entries = self._entries[:]

        if kind is not None:
            entries = [e for e in entries if e.kind == kind]
        if transaction_id is not None:
            entries = [e for e in entries if e.transaction_id == transaction_id]
        if owner is not None:
            entries = [e for e in entries if e.owner == owner]
        return entries

    def export(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.query()]

    def verify(self) -> bool:
        return verify_chain(self.export())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def verify_chain(entries: List[Dict[str, Any]]) -> bool:
    """
    Check an exported notification log.

    Recomputes each payload hash from the body fields and each entry hash from
    its predecessor. Returns False on the first mismatch.
    """
    prev = None
    for index, entry in enumerate(entries):
        try:
            body = {k: entry[k] for k in ("seq", "kind", "transaction_id", "owner", "timestamp")}
        except KeyError:
            return False
        if body["seq"] != index or entry.get("prev_hash") != prev:
            return False
        digest = payload_hash(body)
        if entry.get("payload_hash") != digest:
            return False
        if entry.get("entry_hash") != chain_entry_hash(prev, digest):
            return False
        prev = entry["entry_hash"]
    return True
