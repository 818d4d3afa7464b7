#!/usr/bin/env python3
"""
QuorumWallet Example - Shared Treasury

A 3-of-5 board treasury pays a vendor contract. The vendor's contract tries
to get paid twice by re-entering the wallet during the payment; the wallet
pays once.

Run with: python examples/treasury_example.py
"""

from quorumwallet import InMemoryValueHost, MultiSigWallet, NotificationType
from quorumwallet.logging_config import configure_logging

BOARD = ["treasurer", "chair", "secretary", "auditor", "member"]


def greedy_vendor(transaction, wallet):
    """Vendor contract that re-enters the wallet to get paid again."""
    paid_again = wallet.execute_transaction(transaction.id)
    print(f"  vendor re-entry attempt executed again? {paid_again}")


def main():
    configure_logging("WARNING", json_format=False)

    host = InMemoryValueHost(initial_balance=0)
    host.register_handler("vendor-contract", greedy_vendor)
    wallet = MultiSigWallet(BOARD, required=3, executor=host)

    wallet.deposit("donor", 1_000)
    print(f"Treasury balance: {host.balance}")

    tx_id = wallet.submit_transaction("treasurer", "vendor-contract", 400, b"invoice:2024-117")
    print(f"Proposed tx{tx_id}: {wallet.get_confirmation_count(tx_id)}/{wallet.required} confirmations")

    wallet.confirm_transaction("chair", tx_id)
    wallet.revoke_confirmation("chair", tx_id)
    print(f"Chair confirmed then revoked: {wallet.get_confirmations(tx_id)}")

    wallet.confirm_transaction("auditor", tx_id)
    wallet.confirm_transaction("secretary", tx_id)

    tx = wallet.get_transaction(tx_id)
    print(f"Executed: {tx.executed}")
    print(f"Vendor received: {host.balance_of('vendor-contract')}, treasury balance: {host.balance}")

    executions = wallet.notifications.query(kind=NotificationType.EXECUTION)
    print(f"Execution notifications: {len(executions)}")
    print(f"Notification chain valid: {wallet.notifications.verify()}")


if __name__ == "__main__":
    main()
