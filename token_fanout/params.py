"""
Operator parameters for a fanout run: token contract, amount and
destination count.

Values come from a ParameterSource. The interactive source prompts on the
terminal; the static one returns fixed values for scripted runs and tests.
Each value is validated as soon as it is read, and the first invalid one
ends collection with a ParameterError.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Protocol

from web3 import Web3

from token_fanout.addresses import is_valid_address

ADDRESS_PROMPT = "Enter the ERC20 token contract address: "
AMOUNT_PROMPT = "How much tokens do you want to send: "
COUNT_PROMPT = "How many addresses do you want to send to: "


class ParameterError(ValueError):
    """An operator-supplied value failed validation."""


@dataclass(frozen=True)
class FanoutParams:
    """Validated parameters for a run."""

    token_address: str  # checksummed
    amount: Decimal  # human units
    num_addresses: int


class ParameterSource(Protocol):
    def token_address(self) -> str: ...

    def amount(self) -> str: ...

    def num_addresses(self) -> str: ...


class PromptParameterSource:
    """Blocking terminal prompts, asked in order."""

    def token_address(self) -> str:
        return input(ADDRESS_PROMPT)

    def amount(self) -> str:
        return input(AMOUNT_PROMPT)

    def num_addresses(self) -> str:
        return input(COUNT_PROMPT)


@dataclass
class StaticParameterSource:
    """Fixed answers to the three prompts."""

    address: str
    amount_text: str
    count_text: str

    def token_address(self) -> str:
        return self.address

    def amount(self) -> str:
        return self.amount_text

    def num_addresses(self) -> str:
        return self.count_text


def validate_token_address(value: str) -> str:
    value = value.strip()
    if not is_valid_address(value):
        raise ParameterError("Invalid token address provided")
    return Web3.to_checksum_address(value)


def validate_amount(value: str) -> Decimal:
    """Positive, finite decimal number of tokens."""
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        raise ParameterError("Invalid amount provided")
    if not amount.is_finite() or amount <= 0:
        raise ParameterError("Invalid amount provided")
    return amount


def validate_num_addresses(value: str) -> int:
    try:
        count = int(value.strip(), 10)
    except ValueError:
        raise ParameterError("Invalid number of addresses provided")
    if count <= 0:
        raise ParameterError("Invalid number of addresses provided")
    return count


def collect_params(source: ParameterSource) -> FanoutParams:
    # Validate each answer before asking the next question.
    token_address = validate_token_address(source.token_address())
    amount = validate_amount(source.amount())
    num_addresses = validate_num_addresses(source.num_addresses())
    return FanoutParams(
        token_address=token_address,
        amount=amount,
        num_addresses=num_addresses,
    )
