"""Per-tick results and the drop-and-continue policy applied to them.

A tick either lands a submission (``SENT``), trips over a stale or missing
blockhash (``STALE``) or fails for any other reason (``FAILED``). Only sent
ticks reach the log buffer; stale ones also force the blockhash cache to
refetch. Nothing is retried: the next tick carries the full rate again and
missed amounts are not made up.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .transfer import FeeSplit

STALE_MARKER = "blockhash"


class OutcomeKind(str, Enum):
    SENT = "sent"
    STALE = "stale"
    FAILED = "failed"


@dataclass(frozen=True)
class TickOutcome:
    kind: OutcomeKind
    tick: int
    signature: Optional[str] = None
    split: Optional[FeeSplit] = None
    error: Optional[str] = None

    @classmethod
    def sent(cls, tick: int, signature: str, split: FeeSplit) -> "TickOutcome":
        return cls(OutcomeKind.SENT, tick, signature=signature, split=split)

    @classmethod
    def stale(cls, tick: int, error: str = "no blockhash available") -> "TickOutcome":
        return cls(OutcomeKind.STALE, tick, error=error)

    @classmethod
    def failed(cls, tick: int, error: str) -> "TickOutcome":
        return cls(OutcomeKind.FAILED, tick, error=error)


def classify_failure(tick: int, exc: BaseException) -> TickOutcome:
    message = str(exc) or type(exc).__name__
    if STALE_MARKER in message.lower():
        return TickOutcome.stale(tick, message)
    return TickOutcome.failed(tick, message)


@dataclass(frozen=True)
class TickDecision:
    record: bool
    invalidate_blockhash: bool


def decide(outcome: TickOutcome) -> TickDecision:
    if outcome.kind is OutcomeKind.SENT:
        return TickDecision(record=True, invalidate_blockhash=False)
    if outcome.kind is OutcomeKind.STALE:
        return TickDecision(record=False, invalidate_blockhash=True)
    return TickDecision(record=False, invalidate_blockhash=False)
