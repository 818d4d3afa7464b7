"""
QuorumWallet Core Test Suite

Covers the owner registry, submission, confirmation, revocation, the
authorization predicate and the read accessors.
"""

import unittest

from quorumwallet import (
    AlreadyConfirmed,
    AlreadyExecuted,
    InMemoryValueHost,
    InvalidConfiguration,
    InvalidTransaction,
    MultiSigWallet,
    NotConfirmed,
    NotFound,
    NotificationType,
    OwnerRegistry,
    TransactionStatus,
    Unauthorized,
)


def make_wallet(owners=("A", "B", "C"), required=2, balance=100):
    host = InMemoryValueHost(initial_balance=balance)
    return MultiSigWallet(list(owners), required, executor=host), host


class TestOwnerRegistry(unittest.TestCase):
    """Initialization and membership."""

    def test_valid_configurations_accepted(self):
        owners = ["A", "B", "C", "D"]
        for required in range(1, len(owners) + 1):
            wallet = MultiSigWallet(owners, required)
            self.assertEqual(wallet.required, required)
            self.assertEqual(wallet.owners, tuple(owners))
            for owner in owners:
                self.assertTrue(wallet.is_owner(owner))
            self.assertFalse(wallet.is_owner("E"))
            self.assertFalse(wallet.is_owner(None))

    def test_zero_required_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet(["A", "B"], 0)

    def test_required_above_owner_count_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet(["A", "B"], 3)

    def test_empty_owners_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet([], 1)

    def test_duplicate_owners_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet(["A", "A"], 1)

    def test_empty_identity_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet(["A", ""], 1)
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet(["A", None], 1)

    def test_max_owner_count(self):
        with self.assertRaises(InvalidConfiguration):
            OwnerRegistry([f"o{i}" for i in range(4)], 2, max_owners=3)
        registry = OwnerRegistry([f"o{i}" for i in range(3)], 2, max_owners=3)
        self.assertEqual(registry.owner_count, 3)

    def test_non_integer_required_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet(["A", "B"], 1.5)
        with self.assertRaises(InvalidConfiguration):
            MultiSigWallet(["A", "B"], True)

    def test_invalid_configuration_is_value_error(self):
        with self.assertRaises(ValueError):
            MultiSigWallet(["A"], 2)

    def test_registry_is_immutable(self):
        owners = ["A", "B"]
        wallet = MultiSigWallet(owners, 1)
        owners.append("C")
        self.assertFalse(wallet.is_owner("C"))
        self.assertEqual(wallet.owners, ("A", "B"))

    def test_unhashable_identity_is_not_owner(self):
        wallet = MultiSigWallet(["A"], 1)
        self.assertFalse(wallet.is_owner(["A"]))


class TestSubmission(unittest.TestCase):

    def setUp(self):
        self.wallet, self.host = make_wallet()

    def test_non_owner_submission_rejected(self):
        with self.assertRaises(Unauthorized):
            self.wallet.submit_transaction("Mallory", "D", 5)
        self.assertEqual(self.wallet.transaction_count, 0)
        self.assertEqual(len(self.wallet.notifications), 0)

    def test_submission_auto_confirms(self):
        tx_id = self.wallet.submit_transaction("A", "D", 5)
        self.assertEqual(tx_id, 0)
        self.assertTrue(self.wallet.is_confirmed_by(tx_id, "A"))
        self.assertEqual(self.wallet.get_confirmation_count(tx_id), 1)
        self.assertFalse(self.wallet.is_confirmed(tx_id))

    def test_single_required_confirms_immediately(self):
        wallet, _ = make_wallet(required=1)
        tx_id = wallet.submit_transaction("B", "D", 5)
        self.assertTrue(wallet.is_confirmed(tx_id))

    def test_ids_are_dense(self):
        ids = [self.wallet.submit_transaction("A", "D", i) for i in range(5)]
        self.assertEqual(ids, [0, 1, 2, 3, 4])
        self.assertEqual(self.wallet.transaction_count, 5)

    def test_record_fields(self):
        tx_id = self.wallet.submit_transaction("A", "D", 5, b"\x01\x02")
        tx = self.wallet.get_transaction(tx_id)
        self.assertEqual(tx.destination, "D")
        self.assertEqual(tx.value, 5)
        self.assertEqual(tx.payload, b"\x01\x02")
        self.assertFalse(tx.executed)
        self.assertEqual(tx.confirmations, {"A"})

    def test_submission_then_confirmation_notifications(self):
        tx_id = self.wallet.submit_transaction("A", "D", 5)
        kinds = [(n.kind, n.transaction_id, n.owner) for n in self.wallet.notifications.query()]
        self.assertEqual(kinds, [
            (NotificationType.SUBMISSION, tx_id, None),
            (NotificationType.CONFIRMATION, tx_id, "A"),
        ])

    def test_negative_value_rejected(self):
        with self.assertRaises(InvalidTransaction):
            self.wallet.submit_transaction("A", "D", -1)
        self.assertEqual(self.wallet.transaction_count, 0)

    def test_non_bytes_payload_rejected(self):
        with self.assertRaises(InvalidTransaction):
            self.wallet.submit_transaction("A", "D", 1, "text")
        self.assertEqual(self.wallet.transaction_count, 0)

    def test_null_destination_transaction_exists(self):
        tx_id = self.wallet.submit_transaction("A", None, 0)
        self.wallet.confirm_transaction("B", tx_id)
        self.assertIsNone(self.wallet.get_transaction(tx_id).destination)
        self.assertEqual(self.wallet.get_confirmation_count(tx_id), 2)


class TestConfirmation(unittest.TestCase):

    def setUp(self):
        self.wallet, self.host = make_wallet()
        self.tx_id = self.wallet.submit_transaction("A", "D", 5)

    def test_non_owner_confirmation_rejected(self):
        with self.assertRaises(Unauthorized):
            self.wallet.confirm_transaction("Mallory", self.tx_id)
        self.assertEqual(self.wallet.get_confirmation_count(self.tx_id), 1)

    def test_unknown_transaction(self):
        for bad in (1, -1, 99):
            with self.assertRaises(NotFound):
                self.wallet.confirm_transaction("B", bad)

    def test_unauthorized_checked_before_not_found(self):
        with self.assertRaises(Unauthorized):
            self.wallet.confirm_transaction("Mallory", 99)

    def test_duplicate_confirmation_rejected(self):
        before = len(self.wallet.notifications)
        with self.assertRaises(AlreadyConfirmed):
            self.wallet.confirm_transaction("A", self.tx_id)
        self.assertEqual(self.wallet.get_confirmation_count(self.tx_id), 1)
        self.assertEqual(len(self.wallet.notifications), before)

    def test_threshold_triggers_execution(self):
        self.wallet.confirm_transaction("B", self.tx_id)
        tx = self.wallet.get_transaction(self.tx_id)
        self.assertTrue(tx.executed)
        self.assertEqual(self.host.balance, 95)
        self.assertEqual(self.host.balance_of("D"), 5)
        executions = self.wallet.notifications.query(kind=NotificationType.EXECUTION)
        self.assertEqual([n.transaction_id for n in executions], [self.tx_id])

    def test_confirmation_after_execution_allowed(self):
        self.wallet.confirm_transaction("B", self.tx_id)
        self.wallet.confirm_transaction("C", self.tx_id)
        self.assertTrue(self.wallet.is_confirmed_by(self.tx_id, "C"))
        self.assertEqual(len(self.wallet.notifications.query(kind=NotificationType.EXECUTION)), 1)
        self.assertEqual(self.host.balance, 95)


class TestRevocation(unittest.TestCase):

    def setUp(self):
        self.wallet, self.host = make_wallet(owners=("A", "B", "C"), required=3)
        self.tx_id = self.wallet.submit_transaction("A", "D", 5)
        self.wallet.confirm_transaction("B", self.tx_id)

    def test_revoke_clears_one_confirmation(self):
        self.wallet.revoke_confirmation("B", self.tx_id)
        self.assertFalse(self.wallet.is_confirmed_by(self.tx_id, "B"))
        self.assertTrue(self.wallet.is_confirmed_by(self.tx_id, "A"))
        revocations = self.wallet.notifications.query(kind=NotificationType.REVOCATION)
        self.assertEqual([(n.owner, n.transaction_id) for n in revocations], [("B", self.tx_id)])

    def test_revoke_does_not_execute(self):
        wallet, host = make_wallet(required=2)
        tx_id = wallet.submit_transaction("A", "D", 500)  # unaffordable, stays pending
        wallet.confirm_transaction("B", tx_id)
        host.credit("X", 1000)
        wallet.revoke_confirmation("B", tx_id)
        self.assertFalse(wallet.get_transaction(tx_id).executed)
        self.assertFalse(wallet.is_confirmed(tx_id))

    def test_revoke_recomputes_confirmed(self):
        wallet, host = make_wallet(required=2, balance=0)
        tx_id = wallet.submit_transaction("A", "D", 5)
        wallet.confirm_transaction("B", tx_id)
        self.assertTrue(wallet.is_confirmed(tx_id))
        self.assertEqual(wallet.transaction_status(tx_id), TransactionStatus.CONFIRMED_PENDING)
        wallet.revoke_confirmation("A", tx_id)
        self.assertFalse(wallet.is_confirmed(tx_id))
        self.assertEqual(wallet.transaction_status(tx_id), TransactionStatus.SUBMITTED)

    def test_revoke_without_confirmation(self):
        with self.assertRaises(NotConfirmed):
            self.wallet.revoke_confirmation("C", self.tx_id)

    def test_revoke_by_non_owner(self):
        with self.assertRaises(Unauthorized):
            self.wallet.revoke_confirmation("Mallory", self.tx_id)

    def test_revoke_unknown_transaction(self):
        with self.assertRaises(NotFound):
            self.wallet.revoke_confirmation("A", 7)

    def test_revoke_after_execution(self):
        self.wallet.confirm_transaction("C", self.tx_id)
        self.assertTrue(self.wallet.get_transaction(self.tx_id).executed)
        with self.assertRaises(AlreadyExecuted):
            self.wallet.revoke_confirmation("A", self.tx_id)
        self.assertTrue(self.wallet.is_confirmed_by(self.tx_id, "A"))


class TestAccessors(unittest.TestCase):

    def setUp(self):
        self.wallet, self.host = make_wallet(balance=10)
        self.executed = self.wallet.submit_transaction("A", "D", 5)
        self.wallet.confirm_transaction("B", self.executed)
        self.second = self.wallet.submit_transaction("C", "D", 1)
        self.wallet.confirm_transaction("A", self.second)
        self.fresh = self.wallet.submit_transaction("B", "E", 2)

    def test_second_transaction_executed(self):
        # confirmed by C and A with enough balance left
        self.assertTrue(self.wallet.get_transaction(self.second).executed)

    def test_counts_and_ids(self):
        self.assertEqual(self.wallet.count_transactions(), 3)
        self.assertEqual(self.wallet.count_transactions(pending=False), 2)
        self.assertEqual(self.wallet.count_transactions(executed=False), 1)
        self.assertEqual(self.wallet.get_transaction_ids(), [0, 1, 2])
        self.assertEqual(self.wallet.get_transaction_ids(pending=True, executed=False), [self.fresh])
        self.assertEqual(self.wallet.get_transaction_ids(1, 2), [1])
        self.assertEqual(self.wallet.get_transaction_ids(0, 100, pending=False), [0, 1])

    def test_out_of_range_bounds_are_clamped(self):
        self.assertEqual(self.wallet.get_transaction_ids(0, -1), [])
        self.assertEqual(self.wallet.get_transaction_ids(-5, 2), [0, 1])
        self.assertEqual(self.wallet.get_transaction_ids(7, 9), [])
        self.assertEqual(self.wallet.count_transactions(), 3)

    def test_confirmations_in_registry_order(self):
        self.assertEqual(self.wallet.get_confirmations(self.second), ["A", "C"])

    def test_snapshot_is_detached(self):
        tx = self.wallet.get_transaction(self.fresh)
        tx.confirmations.add("C")
        self.assertFalse(self.wallet.is_confirmed_by(self.fresh, "C"))

    def test_is_confirmed_readable_after_execution(self):
        self.assertTrue(self.wallet.is_confirmed(self.executed))

    def test_is_confirmed_unknown(self):
        with self.assertRaises(NotFound):
            self.wallet.is_confirmed(42)


class TestScenarios(unittest.TestCase):

    def test_scenario_two_of_three(self):
        wallet, host = make_wallet(owners=("A", "B", "C"), required=2, balance=5)

        tx0 = wallet.submit_transaction("A", "D", 5, b"")
        self.assertEqual(wallet.get_confirmation_count(tx0), 1)
        self.assertFalse(wallet.is_confirmed(tx0))

        wallet.confirm_transaction("B", tx0)
        self.assertTrue(wallet.is_confirmed(tx0))
        self.assertTrue(wallet.get_transaction(tx0).executed)

        wallet.confirm_transaction("C", tx0)
        executions = wallet.notifications.query(kind=NotificationType.EXECUTION, transaction_id=tx0)
        self.assertEqual(len(executions), 1)
        self.assertEqual(host.balance_of("D"), 5)

    def test_scenario_single_owner(self):
        wallet, host = make_wallet(owners=("A",), required=1, balance=3)
        tx_id = wallet.submit_transaction("A", "D", 3)
        self.assertTrue(wallet.get_transaction(tx_id).executed)
        kinds = [n.kind for n in wallet.notifications.query()]
        self.assertEqual(kinds, [
            NotificationType.SUBMISSION,
            NotificationType.CONFIRMATION,
            NotificationType.EXECUTION,
        ])


if __name__ == "__main__":
    unittest.main()
