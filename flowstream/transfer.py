from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction
from spl.memo.constants import MEMO_PROGRAM_ID
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import TransferCheckedParams, transfer_checked

from .ledger import StreamAccounts

TICK_SECONDS = 5
PLATFORM_FEE_BPS = 1_000  # 10%
MEMO_PREFIX = "flow402x-"


@dataclass(frozen=True)
class FeeSplit:
    total: int
    platform: int
    recipient: int

    @property
    def has_recipient(self) -> bool:
        return self.recipient > 0


def split_amount(per_second: int, has_recipient: bool) -> FeeSplit:
    total = int(per_second) * TICK_SECONDS
    if not has_recipient:
        return FeeSplit(total=total, platform=total, recipient=0)
    platform = total * PLATFORM_FEE_BPS // 10_000
    return FeeSplit(total=total, platform=platform, recipient=total - platform)


def memo_payload(now_ms: Optional[int] = None) -> bytes:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{MEMO_PREFIX}{now_ms}".encode("utf-8")


def memo_instruction(payload: bytes) -> Instruction:
    # no signer accounts: the memo only makes each tick's message unique
    return Instruction(MEMO_PROGRAM_ID, payload, [])


def _transfer(accounts: StreamAccounts, mint: Pubkey, authority: Pubkey,
              dest: Pubkey, amount: int, decimals: int) -> Instruction:
    return transfer_checked(TransferCheckedParams(
        program_id=TOKEN_PROGRAM_ID,
        source=accounts.payer,
        mint=mint,
        dest=dest,
        owner=authority,
        amount=amount,
        decimals=decimals,
    ))


def build_instructions(accounts: StreamAccounts, mint: Pubkey, authority: Pubkey,
                       split: FeeSplit, decimals: int, memo: bytes) -> List[Instruction]:
    ixs: List[Instruction] = []
    if accounts.recipient is not None:
        ixs.append(_transfer(accounts, mint, authority, accounts.recipient, split.recipient, decimals))
    ixs.append(_transfer(accounts, mint, authority, accounts.platform, split.platform, decimals))
    ixs.append(memo_instruction(memo))
    return ixs


def build_transaction(gateway: Keypair, accounts: StreamAccounts, mint: Pubkey,
                      split: FeeSplit, decimals: int, blockhash: Hash,
                      memo: Optional[bytes] = None) -> Transaction:
    """Signed transfer transaction for one tick.

    The gateway keypair pays the fee and acts as the delegate moving tokens
    out of the payer's pre-approved token account.
    """
    ixs = build_instructions(
        accounts, mint, gateway.pubkey(), split, decimals,
        memo if memo is not None else memo_payload(),
    )
    return Transaction.new_signed_with_payer(ixs, gateway.pubkey(), [gateway], blockhash)


def to_display(units: int, decimals: int) -> str:
    value = Decimal(units) / (Decimal(10) ** decimals)
    return format(value.normalize(), "f")


def short_signature(sig: str) -> str:
    return f"{sig[:4]}...{sig[-4:]}"


def describe_transfer(split: FeeSplit, signature: str, decimals: int, symbol: str) -> str:
    short = short_signature(signature)
    if split.has_recipient:
        up = to_display(split.recipient, decimals)
        pf = to_display(split.platform, decimals)
        return f"✔ Sent {up} {symbol} to creator, {pf} {symbol} fee → {short}"
    return f"✔ Sent {to_display(split.total, decimals)} {symbol} (platform) → {short}"
