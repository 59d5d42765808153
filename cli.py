#!/usr/bin/env python3
"""
Token Fanout — CLI for bulk ERC20 distribution to fresh addresses.

Usage:
    token-fanout [--verbose]

Sender wallets come from PRIVATE_KEYS (environment or .env file):
    PRIVATE_KEYS=["privatekey1", "privatekey2", ...]

The tool then asks for the token contract, the amount per transfer and the
number of destination addresses per wallet, and sends from every funded
wallet to that many newly generated addresses.

Examples:
    # Interactive run with the defaults
    token-fanout

    # Same, with debug logging (includes web3 request logs)
    token-fanout --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Callable, Optional, Sequence

from eth_account.signers.local import LocalAccount

from token_fanout import __version__
from token_fanout.batch import FanoutReport, async_fanout
from token_fanout.config import Settings
from token_fanout.credentials import (
    FORMAT_HINT,
    CredentialsError,
    build_wallets,
    parse_private_keys,
)
from token_fanout.erc20 import Erc20Token, TokenContractError
from token_fanout.params import (
    FanoutParams,
    ParameterError,
    ParameterSource,
    PromptParameterSource,
    collect_params,
)

log = logging.getLogger("fanout")

TokenFactory = Callable[[str, Settings], Erc20Token]

BANNER = r"""
  _____     _                 ___               _
 |_   _|__ | |_____ _ _      | __|_ _ _ _  ___ | |_  _| |_
   | |/ _ \| / / -_) ' \     | _/ _` | ' \/ _ \ || || |  _|
   |_|\___/|_\_\___|_||_|    |_|\__,_|_||_\___/\_,_||_|\__|
  Bulk ERC20 distribution to fresh addresses
"""


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


async def _run(
    params: FanoutParams,
    wallets: Sequence[LocalAccount],
    settings: Settings,
    token_factory: TokenFactory,
) -> FanoutReport:
    async with token_factory(params.token_address, settings) as token:
        await token.check_chain_id()
        return await async_fanout(token, wallets, params, settings)


def cmd_fanout(
    settings: Settings,
    source: ParameterSource,
    token_factory: TokenFactory = Erc20Token,
) -> int:
    """Load wallets, collect parameters and run the fanout. Returns the exit status."""
    try:
        keys = parse_private_keys(settings.private_keys)
    except CredentialsError as e:
        log.error("%s", e)
        log.error("Please ensure your .env file has the correct format:")
        print(FORMAT_HINT)
        return 1

    if not keys:
        log.error("No private keys found in .env file")
        return 1

    log.info("Found %d private keys", len(keys))

    wallets = build_wallets(keys)
    if not wallets:
        log.error("No valid wallets could be created. Please check your private keys.")
        return 1

    try:
        params = collect_params(source)
    except ParameterError as e:
        log.error("%s", e)
        return 1

    try:
        report = asyncio.run(_run(params, wallets, settings, token_factory))
    except TokenContractError as e:
        log.error("%s", e)
        return 1

    print()
    print(report.summary())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="token-fanout",
        description="Token Fanout — Send an ERC20 amount from many wallets to fresh addresses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"token-fanout {__version__}"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    print(BANNER)

    try:
        return cmd_fanout(Settings.from_env(), PromptParameterSource(), Erc20Token)
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1
    except Exception as e:
        log.error("Error in main function: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
