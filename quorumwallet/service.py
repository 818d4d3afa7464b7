"""
HTTP service for QuorumWallet.

Exposes one wallet per process. The caller identity of owner-gated calls is
taken from the X-Caller header; authenticating that header belongs to the
transport in front of this service.
"""

import threading
from typing import Optional

from fastapi import FastAPI, Header, HTTPException

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
from .hashing import transaction_hash
from .notifications import verify_chain
from .models import DepositRequest, NotificationsView, SubmitRequest, TransactionView, WalletView
from .wallet import MultiSigWallet

app = FastAPI(title="QuorumWallet")

STATUS_CODES = {
    Unauthorized: 403,
    NotFound: 404,
    AlreadyConfirmed: 409,
    NotConfirmed: 409,
    AlreadyExecuted: 409,
    ExecutionInProgress: 409,
    InvalidTransaction: 422,
}

WALLET: Optional[MultiSigWallet] = None
_wallet_lock = threading.Lock()


def get_wallet() -> MultiSigWallet:
    global WALLET
    # Sync routes run in a threadpool; only one of them may build the wallet.
    with _wallet_lock:
        if WALLET is None:
            WALLET = MultiSigWallet.from_settings()
        return WALLET


def set_wallet(wallet: Optional[MultiSigWallet]) -> None:
    global WALLET
    with _wallet_lock:
        WALLET = wallet


def _http_error(error: WalletError) -> HTTPException:
    return HTTPException(STATUS_CODES.get(type(error), 400), error.code)


def _caller(x_caller: Optional[str]) -> str:
    if not x_caller:
        raise HTTPException(401, "MISSING_CALLER")
    return x_caller


def _view(wallet: MultiSigWallet, transaction_id: int) -> TransactionView:
    tx = wallet.get_transaction(transaction_id)
    return TransactionView(
        id=tx.id,
        destination=tx.destination,
        value=tx.value,
        payload_hex=tx.payload.hex(),
        executed=tx.executed,
        confirmations=wallet.get_confirmations(transaction_id),
        confirmation_count=wallet.get_confirmation_count(transaction_id),
        is_confirmed=wallet.is_confirmed(transaction_id),
        status=wallet.transaction_status(transaction_id).value,
        action_hash=transaction_hash(tx.destination, tx.value, tx.payload),
    )


@app.get("/wallet", response_model=WalletView)
def wallet_info():
    wallet = get_wallet()
    return WalletView(
        owners=list(wallet.owners),
        required=wallet.required,
        transaction_count=wallet.transaction_count,
        balance=wallet.balance,
    )


@app.post("/transactions")
def submit_transaction(req: SubmitRequest, x_caller: Optional[str] = Header(default=None)):
    caller = _caller(x_caller)
    try:
        payload = bytes.fromhex(req.payload_hex)
    except ValueError:
        raise HTTPException(422, "INVALID_PAYLOAD_HEX")
    try:
        tx_id = get_wallet().submit_transaction(caller, req.destination, req.value, payload)
    except WalletError as e:
        raise _http_error(e)
    return {"transaction_id": tx_id}


@app.get("/transactions")
def list_transactions(
    start: int = 0,
    end: Optional[int] = None,
    pending: bool = True,
    executed: bool = True
):
    wallet = get_wallet()
    return {
        "transaction_ids": wallet.get_transaction_ids(start, end, pending=pending, executed=executed),
        "transaction_count": wallet.transaction_count,
    }


@app.get("/transactions/{transaction_id}", response_model=TransactionView)
def get_transaction(transaction_id: int):
    try:
        return _view(get_wallet(), transaction_id)
    except WalletError as e:
        raise _http_error(e)


@app.post("/transactions/{transaction_id}/confirm", response_model=TransactionView)
def confirm_transaction(transaction_id: int, x_caller: Optional[str] = Header(default=None)):
    caller = _caller(x_caller)
    wallet = get_wallet()
    try:
        wallet.confirm_transaction(caller, transaction_id)
        return _view(wallet, transaction_id)
    except WalletError as e:
        raise _http_error(e)


@app.post("/transactions/{transaction_id}/revoke", response_model=TransactionView)
def revoke_confirmation(transaction_id: int, x_caller: Optional[str] = Header(default=None)):
    caller = _caller(x_caller)
    wallet = get_wallet()
    try:
        wallet.revoke_confirmation(caller, transaction_id)
        return _view(wallet, transaction_id)
    except WalletError as e:
        raise _http_error(e)


@app.post("/transactions/{transaction_id}/execute", response_model=TransactionView)
def execute_transaction(transaction_id: int, x_caller: Optional[str] = Header(default=None)):
    wallet = get_wallet()
    try:
        wallet.execute_transaction(transaction_id, caller=x_caller)
        return _view(wallet, transaction_id)
    except WalletError as e:
        raise _http_error(e)


@app.post("/deposit")
def deposit(req: DepositRequest):
    wallet = get_wallet()
    try:
        wallet.deposit(req.sender, req.value)
    except WalletError as e:
        raise _http_error(e)
    return {"balance": wallet.balance}


@app.get("/notifications", response_model=NotificationsView)
def notifications():
    entries = [n.to_dict() for n in get_wallet().notifications.query()]
    return NotificationsView(entries=entries, chain_valid=verify_chain(entries))
