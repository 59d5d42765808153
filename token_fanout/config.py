"""
Run settings: RPC endpoint, chain id, gas limit, pacing and the raw
PRIVATE_KEYS value loaded from the environment or a .env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Tea Assam testnet. Fixed for this tool; not read from the environment.
DEFAULT_RPC_URL = "https://assam-rpc.tea.xyz/"
DEFAULT_CHAIN_ID = 93384

# Gas ceiling for a single ERC20 transfer call
DEFAULT_GAS_LIMIT = 200_000

# Pause between submissions and between wallets, in seconds
DEFAULT_DELAY_SECONDS = 1.0

DEFAULT_RECEIPT_TIMEOUT_S = 120.0

PRIVATE_KEYS_ENV = "PRIVATE_KEYS"


@dataclass(frozen=True)
class Settings:
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    gas_limit: int = DEFAULT_GAS_LIMIT
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    receipt_timeout_s: float = DEFAULT_RECEIPT_TIMEOUT_S
    private_keys: Optional[str] = None

    @staticmethod
    def from_env() -> "Settings":
        load_dotenv()
        return Settings(private_keys=os.getenv(PRIVATE_KEYS_ENV))
