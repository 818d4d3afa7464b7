"""
QuorumWallet Engine

The MultiSigWallet aggregate owns the registry, the ledger, the executor and
the notification log for one pool of co-owned value. It enforces:

    NO ACTION EXECUTES WITHOUT `required` DISTINCT OWNER CONFIRMATIONS

Transaction lifecycle:
    submit  -> SUBMITTED (auto-confirmed by the submitter)
    confirm -> CONFIRMED_PENDING once the threshold is met
    execute -> EXECUTED on success (terminal)
            -> CONFIRMED_PENDING on failure (retryable by anyone)
    revoke  -> SUBMITTED when the count drops below the threshold

Every public call runs under one reentrant wallet lock, so calls are
serialized across threads while nested calls made by an executing action on
the same thread still proceed. The executed flag is set before the action
runs, and confirm/revoke of a transaction whose action is running are
refused with ExecutionInProgress.
"""

import dataclasses
import logging
import threading
from typing import Any, Dict, Hashable, Iterable, List, Optional, Set, Tuple

from . import config
from .authorization import confirmation_count, is_confirmed, transaction_status
from .errors import (
    AlreadyConfirmed,
    AlreadyExecuted,
    ExecutionInProgress,
    InvalidTransaction,
    NotConfirmed,
    NotFound,
    Unauthorized,
    WalletError,
)
from .executor import ActionExecutor, InMemoryValueHost
from .ledger import Transaction, TransactionLedger, TransactionStatus
from .logging_config import WalletAuditLogger, audit_log
from .notifications import InMemoryNotificationLog, NotificationLog, NotificationType
from .registry import OwnerRegistry

logger = logging.getLogger(__name__)


def _check_value(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidTransaction(f"value must be a non-negative integer, got {value!r}")
    return value


def _check_payload(payload: Any) -> bytes:
    if payload is None:
        return b""
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    raise InvalidTransaction(f"payload must be bytes, got {type(payload).__name__}")


class MultiSigWallet:
    """
    k-of-n multi-party approval wallet.

    Usage:
        wallet = MultiSigWallet(["alice", "bob", "carol"], required=2,
                                executor=InMemoryValueHost(initial_balance=100))

        tx_id = wallet.submit_transaction("alice", "vendor", 5)   # auto-confirmed by alice
        wallet.confirm_transaction("bob", tx_id)                  # threshold met -> executes

        wallet.get_transaction(tx_id).executed                    # True
    """

    def __init__(
        self,
        owners: Iterable[Hashable],
        required: int,
        executor: Optional[ActionExecutor] = None,
        notification_log: Optional[NotificationLog] = None,
        max_owners: Optional[int] = None,
        audit: Optional[WalletAuditLogger] = None
    ):
        self.registry = OwnerRegistry(
            owners,
            required,
            max_owners=config.MAX_OWNERS if max_owners is None else max_owners
        )
        self.ledger = TransactionLedger()
        self.executor = executor if executor is not None else InMemoryValueHost()
        self.notifications = notification_log if notification_log is not None else InMemoryNotificationLog()
        self._audit = audit or audit_log
        self._executing: Set[int] = set()
        self._lock = threading.RLock()

        logger.info("Wallet initialized: %r", self.registry)

    @classmethod
    def from_settings(cls, settings: Optional[Dict[str, Any]] = None, **kwargs) -> "MultiSigWallet":
        """Build a wallet and value host from config.wallet_settings()."""
        settings = settings if settings is not None else config.wallet_settings()
        executor = kwargs.pop("executor", None) or InMemoryValueHost(
            initial_balance=settings.get("initial_balance", 0)
        )
        return cls(settings["owners"], settings["required"], executor=executor, **kwargs)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def owners(self) -> Tuple[Any, ...]:
        return self.registry.owners

    @property
    def required(self) -> int:
        return self.registry.required

    @property
    def transaction_count(self) -> int:
        return self.ledger.transaction_count

    @property
    def balance(self) -> Optional[int]:
        """Pooled balance, when the executor holds value."""
        return getattr(self.executor, "balance", None)

    def is_owner(self, identity: Any) -> bool:
        return self.registry.is_owner(identity)

    def get_transaction(self, transaction_id: int) -> Transaction:
        """Snapshot of a transaction record."""
        with self._lock:
            tx = self.ledger.get(transaction_id)
            return dataclasses.replace(tx, confirmations=set(tx.confirmations))

    def is_confirmed(self, transaction_id: int) -> bool:
        with self._lock:
            return is_confirmed(self.registry, self.ledger.get(transaction_id))

    def is_confirmed_by(self, transaction_id: int, owner: Any) -> bool:
        with self._lock:
            return self.ledger.get(transaction_id).is_confirmed_by(owner)

    def get_confirmation_count(self, transaction_id: int) -> int:
        with self._lock:
            return confirmation_count(self.registry, self.ledger.get(transaction_id))

    def get_confirmations(self, transaction_id: int) -> List[Any]:
        """Confirming owners, in registry order."""
        with self._lock:
            tx = self.ledger.get(transaction_id)
            return [o for o in self.registry.owners if o in tx.confirmations]

    def transaction_status(self, transaction_id: int) -> TransactionStatus:
        with self._lock:
            return transaction_status(self.registry, self.ledger.get(transaction_id))

    def count_transactions(self, pending: bool = True, executed: bool = True) -> int:
        with self._lock:
            return len(self.ledger.select(pending=pending, executed=executed))

    def get_transaction_ids(
        self,
        start: int = 0,
        end: Optional[int] = None,
        pending: bool = True,
        executed: bool = True
    ) -> List[int]:
        with self._lock:
            return self.ledger.select(start, end, pending=pending, executed=executed)

    # ------------------------------------------------------------------
    # Owner-gated operations
    # ------------------------------------------------------------------

    def submit_transaction(self, caller: Any, destination: Any, value: int, payload: bytes = b"") -> int:
        """
        Propose an action and confirm it as the submitter.

        The submitter's confirmation is part of the same call and may execute
        the transaction immediately when required == 1.

        Returns:
            The new transaction id
        """
        with self._lock:
            self._require_owner("submit_transaction", caller)
            try:
                value = _check_value(value)
                payload = _check_payload(payload)
            except InvalidTransaction as e:
                e.owner = caller
                raise self._reject("submit_transaction", e)

            tx = self.ledger.append(destination, value, payload)
            self._emit(NotificationType.SUBMISSION, tx.id)
            self.confirm_transaction(caller, tx.id)
            return tx.id

    def confirm_transaction(self, caller: Any, transaction_id: int) -> None:
        """Record the caller's approval, then attempt execution."""
        with self._lock:
            self._require_owner("confirm_transaction", caller, transaction_id)
            tx = self._require_transaction("confirm_transaction", transaction_id, caller)
            self._require_idle("confirm_transaction", tx, caller)
            if caller in tx.confirmations:
                raise self._reject("confirm_transaction", AlreadyConfirmed(
                    f"{caller!r} already confirmed transaction {transaction_id}",
                    transaction_id=transaction_id, owner=caller
                ))

            tx.confirmations.add(caller)
            self._emit(NotificationType.CONFIRMATION, transaction_id, caller)
            self.execute_transaction(transaction_id, caller=caller)

    def revoke_confirmation(self, caller: Any, transaction_id: int) -> None:
        """Withdraw the caller's approval of an unexecuted transaction."""
        with self._lock:
            self._require_owner("revoke_confirmation", caller, transaction_id)
            tx = self._require_transaction("revoke_confirmation", transaction_id, caller)
            self._require_idle("revoke_confirmation", tx, caller)
            if caller not in tx.confirmations:
                raise self._reject("revoke_confirmation", NotConfirmed(
                    f"{caller!r} has not confirmed transaction {transaction_id}",
                    transaction_id=transaction_id, owner=caller
                ))
            if tx.executed:
                raise self._reject("revoke_confirmation", AlreadyExecuted(
                    f"Transaction {transaction_id} has already been executed",
                    transaction_id=transaction_id, owner=caller
                ))

            tx.confirmations.discard(caller)
            self._emit(NotificationType.REVOCATION, transaction_id, caller)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute_transaction(self, transaction_id: int, caller: Any = None) -> bool:
        """
        Perform the transaction's action if it is confirmed and unexecuted.

        Permissionless and safe to call speculatively: an executed or
        under-confirmed transaction is a silent no-op. A failing action is
        reported as ExecutionFailure and never raised to the caller.

        Returns:
            True if this call executed the transaction
        """
        with self._lock:
            tx = self._require_transaction("execute_transaction", transaction_id, caller)
            if tx.executed:
                return False
            if not is_confirmed(self.registry, tx):
                return False

            tx.executed = True
            self._executing.add(transaction_id)
            succeeded = False
            try:
                self.executor.execute(tx, self)
                succeeded = True
            except Exception as exc:
                logger.warning("Execution of transaction %s failed: %s", transaction_id, exc)
            finally:
                self._executing.discard(transaction_id)
                if not succeeded:
                    tx.executed = False

            if succeeded:
                self._emit(NotificationType.EXECUTION, transaction_id)
            else:
                self._emit(NotificationType.EXECUTION_FAILURE, transaction_id)
            return succeeded

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------

    def deposit(self, sender: Any, value: int) -> None:
        """Accept a bare value transfer from anyone. No ledger change, no notification."""
        with self._lock:
            try:
                value = _check_value(value)
            except InvalidTransaction as e:
                e.owner = sender
                raise self._reject("deposit", e)
            self.executor.credit(sender, value)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_owner(self, operation: str, caller: Any, transaction_id: Optional[int] = None) -> None:
        if not self.registry.is_owner(caller):
            raise self._reject(operation, Unauthorized(
                f"{caller!r} is not an owner",
                transaction_id=transaction_id, owner=caller
            ))

    def _require_transaction(self, operation: str, transaction_id: Any, caller: Any) -> Transaction:
        try:
            return self.ledger.get(transaction_id)
        except NotFound as e:
            e.owner = caller
            raise self._reject(operation, e)

    def _require_idle(self, operation: str, tx: Transaction, caller: Any) -> None:
        if tx.id in self._executing:
            raise self._reject(operation, ExecutionInProgress(
                f"Transaction {tx.id} is being executed",
                transaction_id=tx.id, owner=caller
            ))

    def _reject(self, operation: str, error: WalletError) -> WalletError:
        self._audit.call_rejected(operation, error.code, caller=error.owner, transaction_id=error.transaction_id)
        return error

    def _emit(self, kind: NotificationType, transaction_id: int, owner: Any = None) -> None:
        entry = self.notifications.emit(kind, transaction_id, owner)
        self._audit.notification(entry)

    def __repr__(self) -> str:
        return f"MultiSigWallet({self.registry.required}-of-{self.registry.owner_count}, transactions={self.transaction_count})"
