from __future__ import annotations

import json
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from solders.keypair import Keypair
from solders.pubkey import Pubkey

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

_ENV_KEYS = (
    "RPC_URL",
    "GATEWAY_SECRET_KEY",
    "CREATOR_WALLET",
    "USDC_MINT",
    "LAMPORTS_PER_SECOND",
    "TOKEN_DECIMALS",
    "TOKEN_SYMBOL",
    "HOST",
    "PORT",
)


class Settings(BaseModel):
    rpc_url: str = Field(DEFAULT_RPC_URL, alias="RPC_URL")
    gateway_secret_key: str = Field(..., alias="GATEWAY_SECRET_KEY")
    creator_wallet: str = Field(..., alias="CREATOR_WALLET")
    usdc_mint: str = Field(..., alias="USDC_MINT")
    lamports_per_second: int = Field(1_000_000, alias="LAMPORTS_PER_SECOND", gt=0)
    token_decimals: int = Field(6, alias="TOKEN_DECIMALS", ge=0, le=18)
    token_symbol: str = Field("FLOW", alias="TOKEN_SYMBOL")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(5000, alias="PORT")

    @field_validator("gateway_secret_key")
    @classmethod
    def _secret_key_bytes(cls, v: str) -> str:
        try:
            raw = json.loads(v)
        except ValueError as exc:
            raise ValueError("GATEWAY_SECRET_KEY must be a JSON array of 64 byte values") from exc
        if not isinstance(raw, list) or len(raw) != 64:
            raise ValueError("GATEWAY_SECRET_KEY must be a JSON array of 64 byte values")
        if not all(isinstance(b, int) and 0 <= b <= 255 for b in raw):
            raise ValueError("GATEWAY_SECRET_KEY entries must be integers in 0..255")
        return v

    @field_validator("creator_wallet", "usdc_mint")
    @classmethod
    def _base58_pubkey(cls, v: str) -> str:
        try:
            Pubkey.from_string(v)
        except Exception as exc:
            raise ValueError(f"not a valid base58 public key: {v!r}") from exc
        return v

    def gateway_keypair(self) -> Keypair:
        return Keypair.from_bytes(bytes(json.loads(self.gateway_secret_key)))

    def creator_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.creator_wallet)

    def mint_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.usdc_mint)


def read_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    return value if value not in (None, "") else default


def load_config() -> Settings:
    # dotenv is loaded by the entry point before this runs
    env = {k: read_env(k) for k in _ENV_KEYS}
    if env["RPC_URL"] is None:
        env["RPC_URL"] = read_env("NEXT_PUBLIC_RPC_URL")
    return Settings.model_validate({k: v for k, v in env.items() if v is not None})
