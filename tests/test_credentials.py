"""
Tests for PRIVATE_KEYS parsing and wallet construction.
"""

from __future__ import annotations

import json

import pytest
from eth_account import Account

from conftest import KEY_A, KEY_B, KEY_C
from token_fanout.credentials import CredentialsError, build_wallets, parse_private_keys


def test_parse_valid_array():
    raw = json.dumps([KEY_A, KEY_B])
    assert parse_private_keys(raw) == [KEY_A, KEY_B]


def test_parse_strips_whitespace_and_bom():
    raw = "\ufeff  " + json.dumps([KEY_A]) + " \n"
    assert parse_private_keys(raw) == [KEY_A]


@pytest.mark.parametrize("raw", [None, ""])
def test_absent_value_gives_empty_list(raw):
    assert parse_private_keys(raw) == []


@pytest.mark.parametrize("raw", [
    "   ",
    "\n\t",
    "not json",
    "[0xabc]",
    "['single', 'quotes']",
    '["unterminated"',
])
def test_malformed_value_raises(raw):
    with pytest.raises(CredentialsError, match="Error parsing PRIVATE_KEYS"):
        parse_private_keys(raw)


@pytest.mark.parametrize("raw", ['{"key": "value"}', '"0xabc"', "42"])
def test_non_array_raises(raw):
    with pytest.raises(CredentialsError, match="JSON array"):
        parse_private_keys(raw)


def test_build_wallets_keeps_order_and_trims():
    wallets = build_wallets([f"  {KEY_B}\n", KEY_A])

    assert [w.address for w in wallets] == [
        Account.from_key(KEY_B).address,
        Account.from_key(KEY_A).address,
    ]


def test_build_wallets_skips_invalid_keys(caplog):
    """N valid and M invalid keys give N wallets and M logged errors."""
    keys = [KEY_A, "0x1234", KEY_B, "not-a-key", 17, KEY_C]

    wallets = build_wallets(keys)

    assert len(wallets) == 3
    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(errors) == 3
    assert all(r.getMessage().startswith("Invalid private key:") for r in errors)


def test_build_wallets_all_invalid_gives_nothing(caplog):
    assert build_wallets(["", "zz"]) == []
    assert caplog.text.count("Invalid private key") == 2
