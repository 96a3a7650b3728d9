from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from solana.rpc.commitment import Confirmed
from solders.hash import Hash

from .logger import get_logger

logger = get_logger(__name__)

CACHE_TTL_SECONDS = 25.0


@dataclass(frozen=True)
class BlockhashEntry:
    blockhash: Hash
    last_valid_block_height: int
    fetched_at: float


class BlockhashCache:
    """Latest-blockhash cache for a single RPC client.

    Blockhashes stay valid on the network for roughly 60-90 seconds; reusing
    one for up to ``ttl`` seconds saves a round trip per transfer while
    keeping well inside that window.
    """

    def __init__(self, client: Any, ttl: float = CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self._client = client
        self._ttl = ttl
        self._clock = clock
        self._entry: Optional[BlockhashEntry] = None
        self.fetches = 0

    def get(self) -> Optional[BlockhashEntry]:
        now = self._clock()
        entry = self._entry
        if entry is not None and (now - entry.fetched_at) < self._ttl:
            return entry

        self.fetches += 1
        resp = self._client.get_latest_blockhash(Confirmed)
        value = getattr(resp, "value", None)
        if value is None or value.blockhash is None:
            self._entry = None
            logger.debug("getLatestBlockhash returned no value")
            return None
        self._entry = BlockhashEntry(
            blockhash=value.blockhash,
            last_valid_block_height=int(value.last_valid_block_height),
            fetched_at=now,
        )
        return self._entry

    def invalidate(self) -> None:
        self._entry = None
