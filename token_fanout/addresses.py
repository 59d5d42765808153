"""
Destination addresses and the address-format check for operator input.
"""

from __future__ import annotations

from eth_account import Account
from web3 import Web3


def generate_random_address() -> str:
    """Checksum address of a brand new random account. The key is discarded."""
    return Account.create().address


def is_valid_address(value: str) -> bool:
    if not Web3.is_address(value):
        return False
    body = value[2:] if value[:2].lower() == "0x" else value
    # Mixed-case input must carry a valid EIP-55 checksum.
    if body.lower() != body and body.upper() != body:
        return Web3.is_checksum_address(value)
    return True
