import pytest
from fastapi.testclient import TestClient

from quorumwallet.executor import InMemoryValueHost
from quorumwallet.service import app, set_wallet
from quorumwallet.wallet import MultiSigWallet


@pytest.fixture
def host():
    return InMemoryValueHost(initial_balance=10)


@pytest.fixture
def wallet(host):
    # Fresh 2-of-3 wallet per test for isolation
    w = MultiSigWallet(["A", "B", "C"], 2, executor=host)
    set_wallet(w)
    yield w
    set_wallet(None)


@pytest.fixture
def client(wallet):
    return TestClient(app)
