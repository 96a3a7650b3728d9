"""Shared fixtures: generated keys, a fake RPC client and a thread-free timer."""

import json
import threading
from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from flowstream.blockhash_cache import BlockhashCache
from flowstream.config import Settings
from flowstream.engine import TransferEngine


class FakeClient:
    """Stands in for ``solana.rpc.api.Client``."""

    def __init__(self):
        self.blockhash = Hash.new_unique()
        self.blockhash_calls = 0
        self.sent = []
        self.send_error = None
        self.send_gate = None
        self.send_entered = threading.Event()

    def get_latest_blockhash(self, commitment=None):
        self.blockhash_calls += 1
        if self.blockhash is None:
            return SimpleNamespace(value=None)
        return SimpleNamespace(value=SimpleNamespace(
            blockhash=self.blockhash, last_valid_block_height=1_000,
        ))

    def send_raw_transaction(self, txn, opts=None):
        self.send_entered.set()
        if self.send_gate is not None:
            self.send_gate.wait(5)
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((txn, opts))
        return SimpleNamespace(value=Signature.new_unique())


class FakeTimer:
    def __init__(self, period, callback):
        self.period = period
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True


class FrozenClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def gateway():
    return Keypair()


@pytest.fixture
def settings(gateway):
    return Settings.model_validate({
        "RPC_URL": "http://localhost:8899",
        "GATEWAY_SECRET_KEY": json.dumps(list(bytes(gateway))),
        "CREATOR_WALLET": str(Pubkey.new_unique()),
        "USDC_MINT": str(Pubkey.new_unique()),
        "LAMPORTS_PER_SECOND": "1000000",
    })


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def engine(settings, client, clock):
    return TransferEngine(
        settings,
        client,
        blockhash_cache=BlockhashCache(client, clock=clock),
        timer_factory=FakeTimer,
    )


@pytest.fixture
def payer():
    return str(Pubkey.new_unique())


@pytest.fixture
def uploader():
    return str(Pubkey.new_unique())
