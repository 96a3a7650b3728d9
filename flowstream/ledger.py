from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from .errors import AccountResolutionFailure
from .logger import get_logger

logger = get_logger(__name__)

PubkeyLike = Union[str, Pubkey]


def connect(rpc_url: str) -> Client:
    logger.info("Using RPC: %s", rpc_url)
    return Client(rpc_url, commitment=Confirmed, timeout=60)


def _as_pubkey(value: PubkeyLike) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    return Pubkey.from_string(str(value).strip())


def resolve_token_account(role: str, owner: PubkeyLike, mint: Pubkey) -> Pubkey:
    """Associated token account of ``owner`` for ``mint``.

    Derivation is offline; any malformed wallet is reported as an
    AccountResolutionFailure naming the role it was supplied for.
    """
    try:
        return get_associated_token_address(_as_pubkey(owner), mint)
    except Exception as exc:
        raise AccountResolutionFailure(role, owner, str(exc) or type(exc).__name__) from exc


@dataclass(frozen=True)
class StreamAccounts:
    payer: Pubkey
    platform: Pubkey
    recipient: Optional[Pubkey] = None


def resolve_accounts(
    mint: Pubkey,
    payer: PubkeyLike,
    platform: PubkeyLike,
    recipient: Optional[PubkeyLike] = None,
) -> StreamAccounts:
    if not payer:
        raise AccountResolutionFailure("payer", payer, "wallet is required")
    return StreamAccounts(
        payer=resolve_token_account("payer", payer, mint),
        platform=resolve_token_account("platform", platform, mint),
        recipient=resolve_token_account("recipient", recipient, mint) if recipient else None,
    )
