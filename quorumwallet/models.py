from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SubmitRequest(BaseModel):
    destination: str
    value: int = Field(ge=0)
    payload_hex: str = ""


class DepositRequest(BaseModel):
    sender: str
    value: int = Field(ge=0)


class TransactionView(BaseModel):
    id: int
    destination: Optional[str]
    value: int
    payload_hex: str
    executed: bool
    confirmations: List[str]
    confirmation_count: int
    is_confirmed: bool
    status: str
    action_hash: str


class WalletView(BaseModel):
    owners: List[str]
    required: int
    transaction_count: int
    balance: Optional[int] = None


class NotificationsView(BaseModel):
    entries: List[Dict[str, Any]]
    chain_valid: bool
