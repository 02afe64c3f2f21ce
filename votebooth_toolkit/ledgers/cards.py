"""
In-memory balance card token.

Each card is a non-fungible token carrying one 32-byte payload (ERC-1948
style readData/writeData). For a voting booth the payload is the root of the
card holder's per-motion tree.
"""

from typing import Dict, Optional

from eth_utils import to_checksum_address

from votebooth_toolkit.shared.constants import BoothConstants
from votebooth_toolkit.shared.exceptions import (
    CardException,
    CardNotAuthorized,
    UnknownCard,
)
from votebooth_toolkit.smt.tree import LeafLike, to_leaf_bytes


class BalanceCards:
    """Card registry living at `address`."""

    def __init__(self, address: str):
        self.address = to_checksum_address(address)
        self._owners: Dict[int, str] = {}
        self._approvals: Dict[int, str] = {}
        self._data: Dict[int, bytes] = {}

    def mint(self, owner: str, card_id: int) -> None:
        if card_id in self._owners:
            raise CardException(f"Card {card_id} already minted")
        self._owners[card_id] = to_checksum_address(owner)
        self._data[card_id] = BoothConstants.ZERO_LEAF

    def owner_of(self, card_id: int) -> str:
        try:
            return self._owners[card_id]
        except KeyError:
            raise UnknownCard(f"Card {card_id} does not exist")

    def get_approved(self, card_id: int) -> Optional[str]:
        self.owner_of(card_id)
        return self._approvals.get(card_id)

    def is_authorized(self, sender: str, card_id: int) -> bool:
        sender = to_checksum_address(sender)
        return sender in (self.owner_of(card_id), self._approvals.get(card_id))

    def approve(self, sender: str, spender: str, card_id: int) -> None:
        if to_checksum_address(sender) != self.owner_of(card_id):
            raise CardNotAuthorized(
                f"Only the owner of card {card_id} can approve"
            )
        self._approvals[card_id] = to_checksum_address(spender)

    def transfer_from(
        self, sender: str, owner: str, recipient: str, card_id: int
    ) -> None:
        """Move ownership; the payload travels with the card."""
        if to_checksum_address(owner) != self.owner_of(card_id):
            raise CardNotAuthorized(f"{owner} does not own card {card_id}")
        if not self.is_authorized(sender, card_id):
            raise CardNotAuthorized(
                f"{sender} may not transfer card {card_id}"
            )
        self._owners[card_id] = to_checksum_address(recipient)
        self._approvals.pop(card_id, None)

    def read_data(self, card_id: int) -> bytes:
        self.owner_of(card_id)
        return self._data[card_id]

    def write_data(self, sender: str, card_id: int, data: LeafLike) -> None:
        if not self.is_authorized(sender, card_id):
            raise CardNotAuthorized(
                f"{sender} may not write the payload of card {card_id}"
            )
        self._data[card_id] = to_leaf_bytes(data)
