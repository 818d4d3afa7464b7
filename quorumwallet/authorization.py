"""
QuorumWallet Authorization Predicate

    CONFIRMED(tx) = |{ o in owners : o confirmed tx }| >= required

Pure and read-only. Owners are walked in registry order; the order only
decides how early the walk can stop, never the result.
"""

from .ledger import Transaction, TransactionStatus
from .registry import OwnerRegistry


def is_confirmed(registry: OwnerRegistry, transaction: Transaction) -> bool:
    count = 0
    for owner in registry.owners:
        if owner in transaction.confirmations:
            count += 1
        if count == registry.required:
            return True
    return False


def confirmation_count(registry: OwnerRegistry, transaction: Transaction) -> int:
    """Number of registered owners currently confirming the transaction."""
    return sum(1 for owner in registry.owners if owner in transaction.confirmations)


def transaction_status(registry: OwnerRegistry, transaction: Transaction) -> TransactionStatus:
    if transaction.executed:
        return TransactionStatus.EXECUTED
    if is_confirmed(registry, transaction):
        return TransactionStatus.CONFIRMED_PENDING
    return TransactionStatus.SUBMITTED
