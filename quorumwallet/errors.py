"""
QuorumWallet Error Taxonomy

Every owner-gated operation fails with one of these exceptions, and a failing
precondition always leaves the ledger, confirmation and counter state exactly
as it was before the call.

A failed execution attempt is NOT an error of the calling operation. Executors
raise ExecutionError (or anything else) and the wallet contains it, reporting
the attempt through an ExecutionFailure notification instead.
"""

from typing import Any, Optional


class WalletError(Exception):
    """Base class for all wallet precondition failures."""

    code = "WALLET_ERROR"

    def __init__(self, message: str, transaction_id: Optional[int] = None, owner: Any = None):
        self.transaction_id = transaction_id
        self.owner = owner
        super().__init__(message)


class InvalidConfiguration(WalletError, ValueError):
    """Bad initialization arguments; the wallet never comes into existence."""

    code = "INVALID_CONFIGURATION"


class Unauthorized(WalletError):
    """Non-owner on an owner-gated call."""

    code = "UNAUTHORIZED"


class NotFound(WalletError):
    """Unknown transaction id."""

    code = "NOT_FOUND"


class AlreadyConfirmed(WalletError):
    code = "ALREADY_CONFIRMED"


class NotConfirmed(WalletError):
    code = "NOT_CONFIRMED"


class AlreadyExecuted(WalletError):
    code = "ALREADY_EXECUTED"


class ExecutionInProgress(WalletError):
    """Confirm or revoke attempted while the same transaction is executing."""

    code = "EXECUTION_IN_PROGRESS"


class InvalidTransaction(WalletError, ValueError):
    """Negative value or non-bytes payload on submission or deposit."""

    code = "INVALID_TRANSACTION"


class ExecutionError(Exception):
    """Raised by an executor when the external action cannot be performed."""

    def __init__(self, reason: str, transaction_id: Optional[int] = None):
        self.reason = reason
        self.transaction_id = transaction_id
        super().__init__(f"Execution failed: {reason}")
