"""
QuorumWallet

k-of-n multi-party approval for pooled value.

A group of co-owners proposes actions (a transfer of value to a destination
plus an opaque payload). Each action executes only once `required` distinct
owners have individually confirmed it:

    AUTHORIZED(tx) = |confirmations(tx) ∩ owners| >= required

No single owner can move the pool alone. Execution happens exactly once on
success; a failed action leaves the transaction confirmed and retryable.

Usage:
    from quorumwallet import MultiSigWallet, InMemoryValueHost

    host = InMemoryValueHost(initial_balance=100)
    wallet = MultiSigWallet(["alice", "bob", "carol"], required=2, executor=host)

    tx_id = wallet.submit_transaction("alice", "vendor", 40, b"invoice-17")
    wallet.is_confirmed(tx_id)              # False: 1 of 2

    wallet.confirm_transaction("bob", tx_id)
    wallet.get_transaction(tx_id).executed  # True
    host.balance_of("vendor")               # 40
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

from .errors import (
    WalletError,
    InvalidConfiguration,
    Unauthorized,
    NotFound,
    AlreadyConfirmed,
    NotConfirmed,
    AlreadyExecuted,
    ExecutionInProgress,
    InvalidTransaction,
    ExecutionError,
)

from .registry import OwnerRegistry, DEFAULT_MAX_OWNERS

from .ledger import Transaction, TransactionLedger, TransactionStatus

from .authorization import is_confirmed, confirmation_count, transaction_status

from .notifications import (
    Notification,
    NotificationLog,
    NotificationType,
    InMemoryNotificationLog,
    verify_chain,
)

from .executor import ActionExecutor, InMemoryValueHost

from .wallet import MultiSigWallet


__all__ = [
    "__version__",

    # Errors
    "WalletError",
    "InvalidConfiguration",
    "Unauthorized",
    "NotFound",
    "AlreadyConfirmed",
    "NotConfirmed",
    "AlreadyExecuted",
    "ExecutionInProgress",
    "InvalidTransaction",
    "ExecutionError",

    # Registry and ledger
    "OwnerRegistry",
    "DEFAULT_MAX_OWNERS",
    "Transaction",
    "TransactionLedger",
    "TransactionStatus",

    # Authorization
    "is_confirmed",
    "confirmation_count",
    "transaction_status",

    # Notifications
    "Notification",
    "NotificationLog",
    "NotificationType",
    "InMemoryNotificationLog",
    "verify_chain",

    # Execution
    "ActionExecutor",
    "InMemoryValueHost",

    # Wallet
    "MultiSigWallet",
]
