"""
Core fanout logic for Token Fanout.

Walks the sender wallets in order and, for each one with enough token
balance, sends the same amount to a run of freshly generated addresses.
Every transfer is submitted, then confirmed, before the next one starts.
A fixed pause separates consecutive transfers and consecutive wallets.

Supports:
- Per-wallet balance check with soft skip on insufficient balance
- Gas price fetched once per wallet
- Per-transfer and per-wallet results instead of aborting on errors
- Injectable sleep for delay-free runs
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from eth_account.signers.local import LocalAccount

from token_fanout.addresses import generate_random_address
from token_fanout.config import Settings
from token_fanout.erc20 import (
    Erc20Token,
    TokenContractError,
    format_units,
    to_base_units,
)
from token_fanout.params import FanoutParams

log = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class WalletStatus(Enum):
    """How processing ended for one sender wallet."""

    COMPLETED = "completed"  # every destination was attempted
    INSUFFICIENT_BALANCE = "insufficient_balance"  # skipped, nothing sent
    FAILED = "failed"  # balance or gas price query raised


@dataclass
class TransferResult:
    """Outcome of one transfer to one generated address."""

    destination: str
    success: bool
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    error: Optional[str] = None


@dataclass
class WalletResult:
    """Outcome of processing one sender wallet."""

    address: str
    status: WalletStatus
    balance: Optional[int] = None  # base units
    transfers: list[TransferResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def confirmed(self) -> int:
        return sum(1 for t in self.transfers if t.success)

    @property
    def failed(self) -> int:
        return sum(1 for t in self.transfers if not t.success)


@dataclass
class FanoutReport:
    """Result of a whole run, one entry per wallet in credential order."""

    token_address: str
    amount: str  # human units, as entered
    decimals: int
    wallets: list[WalletResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def submitted(self) -> int:
        return sum(1 for w in self.wallets for t in w.transfers if t.tx_hash)

    @property
    def confirmed(self) -> int:
        return sum(w.confirmed for w in self.wallets)

    @property
    def failed(self) -> int:
        return sum(w.failed for w in self.wallets)

    def summary(self) -> str:
        """Human-readable summary of the run."""
        skipped = sum(
            1 for w in self.wallets if w.status is WalletStatus.INSUFFICIENT_BALANCE
        )
        errored = sum(1 for w in self.wallets if w.status is WalletStatus.FAILED)
        lines = [
            "=== Token Fanout — Run Summary ===",
            f"Token: {self.token_address}",
            f"Amount per transfer: {self.amount}",
            f"Wallets: {len(self.wallets)}",
            f"Transfers confirmed: {self.confirmed}",
            f"Transfers failed: {self.failed}",
        ]
        if skipped:
            lines.append(f"Wallets skipped (insufficient balance): {skipped}")
        if errored:
            lines.append(f"Wallets with errors: {errored}")
        lines.append(f"Duration: {self.duration_seconds:.1f}s")
        return "\n".join(lines)


async def _send_one(
    token: Erc20Token,
    wallet: LocalAccount,
    amount: int,
    amount_text: str,
    gas_price: int,
    settings: Settings,
) -> TransferResult:
    destination = generate_random_address()
    result = TransferResult(destination=destination, success=False)
    try:
        result.tx_hash = await token.transfer(
            wallet,
            destination,
            amount,
            gas_limit=settings.gas_limit,
            gas_price=gas_price,
        )
        log.info(
            "Sent %s tokens from %s to %s", amount_text, wallet.address, destination
        )
        log.info("Tx Hash: %s", result.tx_hash)

        receipt = await token.wait_for_receipt(
            result.tx_hash, timeout=settings.receipt_timeout_s
        )
        result.block_number = receipt.get("blockNumber")
        result.success = True
        log.info("Transaction confirmed")
    except Exception as e:
        result.error = str(e)
        log.error(
            "Failed to send tokens from %s to %s: %s", wallet.address, destination, e
        )
    return result


async def _process_wallet(
    token: Erc20Token,
    wallet: LocalAccount,
    amount: int,
    params: FanoutParams,
    decimals: int,
    settings: Settings,
    sleep: Sleep,
) -> WalletResult:
    result = WalletResult(address=wallet.address, status=WalletStatus.COMPLETED)
    try:
        result.balance = await token.balance_of(wallet.address)
        log.info(
            "Wallet %s token balance: %s",
            wallet.address,
            format_units(result.balance, decimals),
        )

        if result.balance < amount:
            log.error(
                "Wallet %s has insufficient token balance. "
                "Skipping transactions for this wallet.",
                wallet.address,
            )
            result.status = WalletStatus.INSUFFICIENT_BALANCE
            return result

        gas_price = await token.gas_price()

        for j in range(params.num_addresses):
            result.transfers.append(await _send_one(
                token, wallet, amount, str(params.amount), gas_price, settings,
            ))
            if j < params.num_addresses - 1:
                await sleep(settings.delay_seconds)

    except Exception as e:
        result.status = WalletStatus.FAILED
        result.error = str(e)
        log.error("Error processing wallet %s: %s", wallet.address, e)

    return result


async def async_fanout(
    token: Erc20Token,
    wallets: Sequence[LocalAccount],
    params: FanoutParams,
    settings: Settings,
    sleep: Sleep = asyncio.sleep,
) -> FanoutReport:
    """
    Send params.amount tokens from every wallet to params.num_addresses
    freshly generated addresses.

    Parameters:
        token: Token client bound to params.token_address.
        wallets: Sender accounts, processed in order.
        params: Validated operator parameters.
        settings: Gas limit, receipt timeout and pacing delay.
        sleep: Coroutine used for the pause between submissions.

    Returns:
        FanoutReport with one WalletResult per wallet.

    Raises:
        TokenContractError: decimals could not be read, or the amount is
            not representable in the token's base units. Nothing has been
            sent when this is raised.
    """
    start_time = time.time()

    try:
        decimals = await token.decimals()
    except Exception as e:
        raise TokenContractError(f"Error interacting with token contract: {e}") from e

    amount = to_base_units(params.amount, decimals)
    report = FanoutReport(
        token_address=params.token_address,
        amount=str(params.amount),
        decimals=decimals,
    )

    for i, wallet in enumerate(wallets):
        wallet_result = await _process_wallet(
            token, wallet, amount, params, decimals, settings, sleep,
        )
        report.wallets.append(wallet_result)

        # A wallet skipped for low balance moves straight on to the next one.
        if wallet_result.status is WalletStatus.INSUFFICIENT_BALANCE:
            continue

        if i < len(wallets) - 1:
            await sleep(settings.delay_seconds)

    report.duration_seconds = time.time() - start_time
    return report
