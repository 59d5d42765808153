"""
ERC20 token client over an async JSON-RPC connection.

Wraps AsyncWeb3 and the three contract calls a fanout needs: decimals,
balanceOf and transfer. Transactions are built and signed locally with the
sender's eth_account key and submitted as raw transactions, so the node
never holds any key material.

Every method is a coroutine and is awaited by the caller before the next
one is issued; nothing here runs calls concurrently.
"""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Any

from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3

from token_fanout.config import Settings

# Minimal ERC20 ABI: transfer, balanceOf, decimals
ERC20_ABI = [
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
]


# Enough significant digits for any uint256 amount
UNIT_PRECISION = 100

# Largest value a uint256 transfer amount can carry
MAX_UINT256 = 2**256 - 1


class TokenContractError(RuntimeError):
    """The token contract or the network cannot be used for this run."""


class TransferReverted(RuntimeError):
    """A transfer was mined but its receipt reports failure."""


def to_base_units(amount: Decimal, decimals: int) -> int:
    """
    Scale a human-readable token amount to base units.

    The conversion is exact integer arithmetic on the decimal digits, so no
    context precision or exponent limit applies. Raises TokenContractError
    if the amount has more fractional digits than the token supports or
    does not fit in a uint256.
    """
    if not amount.is_finite():
        raise TokenContractError(f"Amount {amount} is not a finite number")
    sign, digits, exponent = amount.as_tuple()
    coefficient = int("".join(map(str, digits)))
    if coefficient == 0:
        return 0
    shift = exponent + decimals
    if shift < 0:
        # A non-zero coefficient shorter than the divisor cannot divide evenly.
        if -shift > len(digits) or coefficient % 10**-shift:
            raise TokenContractError(
                f"Amount {amount} has more than {decimals} decimal places"
            )
        value = coefficient // 10**-shift
    else:
        # uint256 max has 78 digits
        if len(digits) + shift > 78:
            raise TokenContractError(f"Amount {amount} is too large for the token")
        value = coefficient * 10**shift
    if value > MAX_UINT256:
        raise TokenContractError(f"Amount {amount} is too large for the token")
    return -value if sign else value


def format_units(value: int, decimals: int) -> str:
    """Base units back to a human-readable string, e.g. 1500000 @ 6 -> '1.5'."""
    with localcontext() as ctx:
        ctx.prec = UNIT_PRECISION
        text = format(Decimal(value).scaleb(-decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class Erc20Token:
    """An ERC20 contract on the configured network."""

    def __init__(self, address: str, settings: Settings, w3: AsyncWeb3 | None = None) -> None:
        self.settings = settings
        self.w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.rpc_url))
        self.address = Web3.to_checksum_address(address)
        self.contract = self.w3.eth.contract(address=self.address, abi=ERC20_ABI)

    async def __aenter__(self) -> "Erc20Token":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        # AsyncHTTPProvider keeps a cached aiohttp session per endpoint.
        disconnect = getattr(self.w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()

    async def check_chain_id(self) -> None:
        chain_id = await self.w3.eth.chain_id
        if chain_id != self.settings.chain_id:
            raise TokenContractError(
                f"Connected to chain {chain_id}, expected {self.settings.chain_id}"
            )

    async def decimals(self) -> int:
        return int(await self.contract.functions.decimals().call())

    async def balance_of(self, address: str) -> int:
        return int(await self.contract.functions.balanceOf(address).call())

    async def gas_price(self) -> int:
        return int(await self.w3.eth.gas_price)

    async def transfer(
        self,
        wallet: LocalAccount,
        to: str,
        amount: int,
        gas_limit: int,
        gas_price: int,
    ) -> str:
        """Sign and submit transfer(to, amount) from wallet. Returns the 0x tx hash."""
        nonce = await self.w3.eth.get_transaction_count(wallet.address, "pending")
        tx = await self.contract.functions.transfer(
            Web3.to_checksum_address(to), amount
        ).build_transaction({
            "from": wallet.address,
            "nonce": nonce,
            "gas": gas_limit,
            "gasPrice": gas_price,
            "chainId": self.settings.chain_id,
        })
        signed = wallet.sign_transaction(tx)
        # eth-account renamed rawTransaction -> raw_transaction in 0.13
        raw = getattr(signed, "raw_transaction", None) or getattr(signed, "rawTransaction")
        tx_hash = await self.w3.eth.send_raw_transaction(raw)
        return Web3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> Any:
        receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        if receipt["status"] != 1:
            raise TransferReverted(f"Transaction {tx_hash} reverted")
        return receipt
