#!/usr/bin/env python3
"""
QuorumWallet Command Line Interface

Usage:
    quorumwallet demo
    quorumwallet run --scenario <file> [--output <file>]
    quorumwallet verify-log --file <file>
    quorumwallet serve [--host <host>] [--port <port>]
"""

import argparse
import json
import sys
from typing import Any, Dict, List

from . import config
from .errors import ExecutionError, WalletError
from .executor import InMemoryValueHost
from .logging_config import configure_logging
from .notifications import verify_chain
from .wallet import MultiSigWallet


def load_json(path: str) -> Any:
    """Load JSON from file."""
    with open(path, 'r') as f:
        return json.load(f)


def save_json(data: Any, path: str):
    """Save JSON to file."""
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)


def _rejecting_handler(transaction, wallet):
    raise ExecutionError(f"destination {transaction.destination} rejects payments", transaction.id)


def apply_operation(wallet: MultiSigWallet, op: Dict[str, Any]) -> Dict[str, Any]:
    """Apply one scenario step and describe its outcome."""
    name = op.get("op")
    try:
        if name == "submit":
            payload = bytes.fromhex(op.get("payload_hex", ""))
            tx_id = wallet.submit_transaction(op["caller"], op["destination"], op["value"], payload)
            return {"op": name, "ok": True, "transaction_id": tx_id}
        elif name == "confirm":
            wallet.confirm_transaction(op["caller"], op["id"])
        elif name == "revoke":
            wallet.revoke_confirmation(op["caller"], op["id"])
        elif name == "execute":
            executed = wallet.execute_transaction(op["id"], caller=op.get("caller"))
            return {"op": name, "ok": True, "executed": executed}
        elif name == "deposit":
            wallet.deposit(op["sender"], op["value"])
        else:
            return {"op": name, "ok": False, "error": "UNKNOWN_OPERATION"}
    except WalletError as e:
        return {"op": name, "ok": False, "error": e.code}
    return {"op": name, "ok": True}


def run_scenario(scenario: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replay a scenario against a fresh wallet.

    Scenario format:
        {
          "owners": ["A", "B", "C"],
          "required": 2,
          "initial_balance": 100,
          "rejecting_destinations": ["X"],
          "operations": [
            {"op": "submit", "caller": "A", "destination": "D", "value": 5},
            {"op": "confirm", "caller": "B", "id": 0}
          ]
        }
    """
    host = InMemoryValueHost(initial_balance=scenario.get("initial_balance", 0))
    for destination in scenario.get("rejecting_destinations", []):
        host.register_handler(destination, _rejecting_handler)

    wallet = MultiSigWallet(scenario["owners"], scenario["required"], executor=host)
    results: List[Dict[str, Any]] = [apply_operation(wallet, op) for op in scenario.get("operations", [])]

    return {
        "results": results,
        "transactions": [
            wallet.get_transaction(i).to_dict(wallet.owners) for i in range(wallet.transaction_count)
        ],
        "balance": host.balance,
        "notifications": wallet.notifications.export(),
    }


def cmd_run(args):
    """Replay a scenario file."""
    try:
        report = run_scenario(load_json(args.scenario))
    except WalletError as e:
        print(f"✗ {e.code}: {e}", file=sys.stderr)
        return 1

    if args.output:
        save_json(report, args.output)
        print(f"Report saved to: {args.output}")
    else:
        print(json.dumps(report, indent=2))
    return 0


def cmd_verify_log(args):
    """Verify an exported notification log."""
    data = load_json(args.file)
    entries = data.get("notifications", data.get("entries", [])) if isinstance(data, dict) else data

    if verify_chain(entries):
        print(f"✓ notification chain valid ({len(entries)} entries)")
        return 0
    print("✗ notification chain INVALID")
    return 1


def cmd_demo(args):
    """Run a demonstration of QuorumWallet."""
    print("=" * 60)
    print("QuorumWallet Demonstration")
    print("=" * 60)

    # Scenario A: 2-of-3
    print("\n" + "-" * 60)
    print("Scenario A: owners=[A, B, C], required=2")
    print("-" * 60)

    host = InMemoryValueHost(initial_balance=10)
    wallet = MultiSigWallet(["A", "B", "C"], 2, executor=host)

    tx_id = wallet.submit_transaction("A", "D", 5)
    print(f"A submits tx{tx_id}: confirmations={wallet.get_confirmations(tx_id)} "
          f"confirmed={wallet.is_confirmed(tx_id)}")

    wallet.confirm_transaction("B", tx_id)
    print(f"B confirms tx{tx_id}: executed={wallet.get_transaction(tx_id).executed} "
          f"balance={host.balance} paid_to_D={host.balance_of('D')}")

    wallet.confirm_transaction("C", tx_id)
    print(f"C confirms tx{tx_id}: still executed once, balance={host.balance}")

    # Scenario B: 1-of-1
    print("\n" + "-" * 60)
    print("Scenario B: owners=[A], required=1")
    print("-" * 60)

    solo = MultiSigWallet(["A"], 1, executor=InMemoryValueHost(initial_balance=3))
    solo_id = solo.submit_transaction("A", "E", 3)
    print(f"A submits tx{solo_id}: executed={solo.get_transaction(solo_id).executed}")

    # Scenario C: failure and retry
    print("\n" + "-" * 60)
    print("Scenario C: insufficient funds, then deposit and retry")
    print("-" * 60)

    retry_host = InMemoryValueHost()
    retry = MultiSigWallet(["A", "B"], 2, executor=retry_host)
    retry_id = retry.submit_transaction("A", "F", 7)
    retry.confirm_transaction("B", retry_id)
    print(f"B confirms tx{retry_id}: executed={retry.get_transaction(retry_id).executed} "
          f"(status {retry.transaction_status(retry_id).value})")
    retry.deposit("G", 7)
    retry.execute_transaction(retry_id)
    print(f"after deposit, retry: executed={retry.get_transaction(retry_id).executed}")

    print("\nNotifications (scenario C):")
    for entry in retry.notifications.query():
        owner = f" owner={entry.owner}" if entry.owner is not None else ""
        print(f"  {entry.seq}: {entry.kind.value}(tx{entry.transaction_id}){owner}")
    print(f"Chain valid: {retry.notifications.verify()}")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def cmd_serve(args):
    """Serve the HTTP API."""
    import uvicorn

    failed = [name for name, ok in config.validate_config().items() if not ok]
    if failed:
        print(f"✗ invalid configuration: {', '.join(failed)}", file=sys.stderr)
        return 1

    from .service import get_wallet

    try:
        wallet = get_wallet()
    except WalletError as e:
        print(f"✗ {e.code}: {e}", file=sys.stderr)
        return 1
    print(f"Serving {wallet.registry!r} on {args.host or config.HOST}:{args.port or config.PORT}")

    configure_logging(config.LOG_LEVEL, json_format=config.LOG_JSON, log_file=config.LOG_FILE or None)
    uvicorn.run(
        "quorumwallet.service:app",
        host=args.host or config.HOST,
        port=args.port or config.PORT,
        log_level=config.LOG_LEVEL.lower(),
        access_log=False,
    )
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="quorumwallet",
        description="QuorumWallet multi-party approval CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quorumwallet demo                       Run demonstration
  quorumwallet run -s scenario.json       Replay a scenario
  quorumwallet verify-log -f report.json  Check a notification chain
  quorumwallet serve --port 8780          Start the HTTP API
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("demo", help="Run demonstration")

    run_parser = subparsers.add_parser("run", help="Replay a scenario file")
    run_parser.add_argument("-s", "--scenario", required=True, help="Scenario JSON file")
    run_parser.add_argument("-o", "--output", help="Output file for the report")

    verify_parser = subparsers.add_parser("verify-log", help="Verify a notification log export")
    verify_parser.add_argument("-f", "--file", required=True, help="Report or log JSON file")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    args = parser.parse_args(argv)

    if args.command == "demo":
        return cmd_demo(args)
    elif args.command == "run":
        return cmd_run(args)
    elif args.command == "verify-log":
        return cmd_verify_log(args)
    elif args.command == "serve":
        return cmd_serve(args)
    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
