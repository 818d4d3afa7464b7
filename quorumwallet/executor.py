"""
QuorumWallet Action Executors

The executor is the only path from an authorized transaction to the outside
world: it moves the transaction's value to its destination and delivers the
payload. The wallet calls it exactly once per execution attempt, after the
transaction has already been marked executed.

Contract:
    execute(transaction, wallet) returns normally  -> attempt succeeded
    execute(transaction, wallet) raises anything   -> attempt failed

A failed attempt must leave no partial effect behind. The wallet rolls back
its own executed flag; the executor rolls back whatever it moved.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from .errors import ExecutionError, InvalidTransaction
from .ledger import Transaction

logger = logging.getLogger(__name__)

# handler(transaction, wallet); may call back into the wallet
PayloadHandler = Callable[[Transaction, Any], None]


class ActionExecutor(ABC):
    """Abstract interface for performing a transaction's external action."""

    @abstractmethod
    def execute(self, transaction: Transaction, wallet: Any) -> None:
        """Perform the transfer and deliver the payload, or raise."""
        pass

    def credit(self, sender: Any, value: int) -> None:
        """
        Accept a bare value transfer into the pooled balance.

        Executors that do not hold value accept deposits passively and
        record nothing.
        """
        pass


class InMemoryValueHost(ActionExecutor):
    """
    In-memory custody of the pooled balance.

    Holds the wallet's balance and the balances it has paid out to each
    destination. Destinations that are more than passive accounts register a
    payload handler; a handler that raises rejects the transfer.

    WARNING: Not suitable for production.
    - Not persistent
    - Balances are plain integers with no currency semantics
    """

    def __init__(self, initial_balance: int = 0):
        if initial_balance < 0:
            raise InvalidTransaction("initial balance must be non-negative")
        self._balance = initial_balance
        self._paid: Dict[Any, int] = {}
        self._handlers: Dict[Any, PayloadHandler] = {}
        self._lock = threading.RLock()

    @property
    def balance(self) -> int:
        return self._balance

    def balance_of(self, destination: Any) -> int:
        return self._paid.get(destination, 0)

    def register_handler(self, destination: Any, handler: PayloadHandler) -> None:
        with self._lock:
            self._handlers[destination] = handler

    def credit(self, sender: Any, value: int) -> None:
        with self._lock:
            self._balance += value
        logger.debug("Credited %s from %r, balance=%s", value, sender, self._balance)

    def execute(self, transaction: Transaction, wallet: Any) -> None:
        if transaction.destination is None:
            raise ExecutionError("null destination", transaction.id)

        with self._lock:
            if transaction.value > self._balance:
                raise ExecutionError(
                    f"insufficient funds: need {transaction.value}, have {self._balance}",
                    transaction.id
                )
            # Lookups first: an unhashable destination must fail before any debit.
            paid = self.balance_of(transaction.destination)
            handler: Optional[PayloadHandler] = self._handlers.get(transaction.destination)
            self._balance -= transaction.value
            self._paid[transaction.destination] = paid + transaction.value

        if handler is None:
            return

        try:
            handler(transaction, wallet)
        except Exception:
            with self._lock:
                self._balance += transaction.value
                self._paid[transaction.destination] -= transaction.value
            raise
