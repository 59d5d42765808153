"""
Sender credentials for a fanout run.

PRIVATE_KEYS holds a JSON array of hex private keys:

    PRIVATE_KEYS=["privatekey1", "privatekey2", ...]

A malformed value is fatal. A single bad key inside a well-formed list is
only logged and skipped.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

log = logging.getLogger(__name__)

FORMAT_HINT = 'PRIVATE_KEYS=["privatekey1", "privatekey2", ...]'

BOM = "\ufeff"


class CredentialsError(ValueError):
    """PRIVATE_KEYS is present but cannot be used."""


def parse_private_keys(raw: Optional[str]) -> list[Any]:
    """
    Decode the PRIVATE_KEYS value.

    Returns an empty list when the value is absent. Entries are returned
    as-is; build_wallets decides which of them are usable keys.
    """
    if not raw:
        return []

    cleaned = raw.strip().lstrip(BOM).strip()
    try:
        keys = json.loads(cleaned)
    except ValueError as e:
        raise CredentialsError(f"Error parsing PRIVATE_KEYS: {e}") from e

    if not isinstance(keys, list):
        raise CredentialsError(
            f"PRIVATE_KEYS must be a JSON array, got {type(keys).__name__}"
        )
    return keys


def build_wallets(keys: list[Any]) -> list[LocalAccount]:
    """One signing account per usable key, in the order the keys were listed."""
    wallets = []
    for key in keys:
        try:
            wallets.append(Account.from_key(key.strip()))
        except Exception as e:
            log.error("Invalid private key: %s", e)
    return wallets
