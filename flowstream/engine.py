from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from solana.rpc.types import TxOpts

from .blockhash_cache import BlockhashCache
from .config import Settings
from .errors import AlreadyRunning
from .ledger import PubkeyLike, StreamAccounts, connect, resolve_accounts
from .logbuffer import LogBuffer, LogEntry
from .logger import get_logger
from .outcome import OutcomeKind, TickOutcome, classify_failure, decide
from .timer import IntervalTimer
from .transfer import TICK_SECONDS, build_transaction, describe_transfer, memo_payload, split_amount

logger = get_logger(__name__)

BLOCKHASH_REFRESH_TICKS = 10

SEND_OPTS = TxOpts(skip_confirmation=True, skip_preflight=True, max_retries=0)


class EngineStatus(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    active: bool
    first_transfer_confirmed: bool = Field(..., alias="firstTransferConfirmed")
    transfer_count: int = Field(..., alias="transferCount")

    def as_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TransferEngine:
    """Streams ``per_second * TICK_SECONDS`` token units every tick while running.

    One engine is built per process and handed to whoever serves the
    start/stop/logs/status calls. Callers must not race ``start`` against
    ``stop``; ticks themselves are serialized by the engine.
    """

    def __init__(
        self,
        settings: Settings,
        client: Any = None,
        *,
        period: float = TICK_SECONDS,
        blockhash_cache: Optional[BlockhashCache] = None,
        timer_factory: Callable[[float, Callable[[], object]], IntervalTimer] = IntervalTimer,
        clock_ms: Callable[[], int] = lambda: int(time.time() * 1000),
    ) -> None:
        self.settings = settings
        self.client = client if client is not None else connect(settings.rpc_url)
        self.blockhash_cache = blockhash_cache or BlockhashCache(self.client)
        self.gateway = settings.gateway_keypair()
        self.creator = settings.creator_pubkey()
        self.mint = settings.mint_pubkey()
        self.per_second = settings.lamports_per_second
        self.period = period
        self._timer_factory = timer_factory
        self._clock_ms = clock_ms
        self._timer: Optional[IntervalTimer] = None
        self._tick_guard = threading.Lock()
        self._logs = LogBuffer()
        # bumped by start; ticks from an earlier stream must not touch this one
        self._generation = 0

        self.accounts: Optional[StreamAccounts] = None
        self.last_signature: Optional[str] = None
        self.transfer_count = 0
        self.first_transfer_confirmed = False

    @property
    def active(self) -> bool:
        return self._timer is not None

    def log(self, line: str, tx_id: Optional[str] = None) -> None:
        logger.info("[LOG] %s%s", line, f" ({tx_id})" if tx_id else "")
        self._logs.append(line, tx_id)

    # ---------------- lifecycle ---------------- #

    def start(self, payer: PubkeyLike, recipient: Optional[PubkeyLike] = None) -> None:
        if self._timer is not None:
            raise AlreadyRunning()
        accounts = resolve_accounts(self.mint, payer, self.creator, recipient)

        self._generation += 1
        self.accounts = accounts
        self._logs.clear()
        self.transfer_count = 0
        self.last_signature = None
        self.first_transfer_confirmed = False
        self.log("▶ Stream started")

        self._timer = self._timer_factory(self.period, self.execute_transfer)
        self._timer.start()

    def stop(self) -> None:
        if self._timer is None:
            # a tick that finished after the last stop may have set the flag
            self.first_transfer_confirmed = False
            return
        self._timer.cancel()
        self._timer = None
        self.transfer_count = 0
        self.last_signature = None
        self.first_transfer_confirmed = False
        self.log("⏹ Stream stopped")

    # ---------------- ticks ---------------- #

    def execute_transfer(self) -> Optional[TickOutcome]:
        """Run one tick. Returns None when a previous tick is still in flight."""
        if not self._tick_guard.acquire(blocking=False):
            logger.debug("tick skipped: previous tick still in flight")
            return None
        try:
            generation = self._generation
            outcome = self._run_tick()
            self._apply(outcome, generation)
            return outcome
        finally:
            self._tick_guard.release()

    def _run_tick(self) -> TickOutcome:
        self.transfer_count += 1
        tick = self.transfer_count

        if tick % BLOCKHASH_REFRESH_TICKS == 0:
            self.blockhash_cache.invalidate()

        accounts = self.accounts
        if accounts is None:
            return TickOutcome.failed(tick, "stream has no resolved accounts")

        try:
            entry = self.blockhash_cache.get()
            if entry is None:
                return TickOutcome.stale(tick)

            split = split_amount(self.per_second, accounts.recipient is not None)
            tx = build_transaction(
                self.gateway, accounts, self.mint, split,
                self.settings.token_decimals, entry.blockhash,
                memo=memo_payload(self._clock_ms()),
            )
            resp = self.client.send_raw_transaction(bytes(tx), opts=SEND_OPTS)
            return TickOutcome.sent(tick, str(resp.value), split)
        except Exception as exc:
            return classify_failure(tick, exc)

    def _apply(self, outcome: TickOutcome, generation: int) -> None:
        decision = decide(outcome)
        if decision.invalidate_blockhash:
            self.blockhash_cache.invalidate()
        if outcome.kind is not OutcomeKind.SENT:
            logger.debug("tick %d dropped (%s): %s", outcome.tick, outcome.kind.value, outcome.error)
        if not decision.record:
            return
        if generation != self._generation:
            logger.debug("tick %d belongs to a previous stream; not recorded", outcome.tick)
            return

        self.last_signature = outcome.signature
        self.log(
            describe_transfer(outcome.split, outcome.signature,
                              self.settings.token_decimals, self.settings.token_symbol),
            outcome.signature,
        )
        if not self.first_transfer_confirmed:
            self.first_transfer_confirmed = True

    # ---------------- reads ---------------- #

    def get_logs(self) -> List[LogEntry]:
        return self._logs.entries()

    def get_status(self) -> EngineStatus:
        return EngineStatus(
            active=self.active,
            first_transfer_confirmed=self.first_transfer_confirmed,
            transfer_count=self.transfer_count,
        )
