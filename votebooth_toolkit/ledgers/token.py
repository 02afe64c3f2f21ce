"""
In-memory fungible token ledger.

Reference collaborator for voice credits and tally tokens: balances and
allowances keyed by checksum address, transfer/transfer_from/approve
semantics of an ERC-20 token. Nothing here is persisted.
"""

from collections import defaultdict
from typing import Dict, Tuple

from eth_utils import to_checksum_address

from votebooth_toolkit.shared.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
)
from votebooth_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)


class TokenLedger:
    """ERC-20 style ledger living at `address`."""

    def __init__(self, address: str, symbol: str = "TOKEN"):
        self.address = to_checksum_address(address)
        self.symbol = symbol
        self.total_supply = 0
        self._balances: Dict[str, int] = defaultdict(int)
        self._allowances: Dict[Tuple[str, str], int] = defaultdict(int)

    def balance_of(self, account: str) -> int:
        return self._balances.get(to_checksum_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        key = (to_checksum_address(owner), to_checksum_address(spender))
        return self._allowances.get(key, 0)

    def mint(self, to: str, amount: int) -> None:
        self._check_amount(amount)
        self._balances[to_checksum_address(to)] += amount
        self.total_supply += amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self._check_amount(amount)
        key = (to_checksum_address(owner), to_checksum_address(spender))
        self._allowances[key] = amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        self._move(to_checksum_address(sender), recipient, amount)

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> None:
        """Move `amount` from `owner` to `recipient` on `spender`'s allowance."""
        self._check_amount(amount)
        owner = to_checksum_address(owner)
        key = (owner, to_checksum_address(spender))
        if self._allowances.get(key, 0) < amount:
            raise InsufficientAllowance(
                f"{self.symbol}: {key[1]} may spend "
                f"{self._allowances.get(key, 0)} of {owner}, needs {amount}"
            )
        self._move(owner, recipient, amount)
        self._allowances[key] -= amount

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self._check_amount(amount)
        recipient = to_checksum_address(recipient)
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"{self.symbol}: {sender} holds {balance}, needs {amount}"
            )
        self._balances[sender] = balance - amount
        self._balances[recipient] += amount
        _logger.debug(
            "%s transfer %s -> %s: %s", self.symbol, sender, recipient, amount
        )

    @staticmethod
    def _check_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"Token amount must be an int, got {amount!r}")
        if amount < 0:
            raise ValueError(f"Token amount must be non-negative, got {amount}")
