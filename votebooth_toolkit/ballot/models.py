"""
Type definitions for ballots.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TypedDict

# =============================================================================
# ENUMS
# =============================================================================


class Outcome(Enum):
    """Direction of a signed vote weight."""

    YES = "yes"  # Positive weight
    NO = "no"  # Negative weight
    ABSTAIN = "abstain"  # Zero, no vote cast

    @classmethod
    def of(cls, amount: int) -> "Outcome":
        if amount > 0:
            return cls.YES
        if amount < 0:
            return cls.NO
        return cls.ABSTAIN


class Asset(Enum):
    """Ledger a transfer settles on."""

    VOICE_CREDITS = "voice_credits"
    TALLY = "tally"


# =============================================================================
# TYPED DICTS (for JSON serialization)
# =============================================================================


class TransferDict(TypedDict):
    asset: str
    sender: str
    recipient: str
    amount: int


class BallotQuoteDict(TypedDict):
    """Cost and tally routing preview."""

    previous_amount: int
    new_amount: int
    previous_outcome: str
    new_outcome: str
    cost: int
    tally_credit: int
    tally_withdrawal: int


class BallotReceiptDict(TypedDict):
    card_id: int
    motion_id: int
    voter: str
    previous_amount: int
    new_amount: int
    cost: int
    old_root: str
    new_root: str
    transfers: List[TransferDict]


# =============================================================================
# DATACLASSES
# =============================================================================


@dataclass(frozen=True)
class Transfer:
    """
    One ledger movement produced by a ballot.

    `sender` is the account debited; the booth moves it either with
    transfer (sender is the booth) or transfer_from (any other sender).
    """

    asset: Asset
    sender: str
    recipient: str
    amount: int

    def reversed(self) -> "Transfer":
        """The movement that undoes this one."""
        return Transfer(self.asset, self.recipient, self.sender, self.amount)

    def to_dict(self) -> TransferDict:
        return {
            "asset": self.asset.value,
            "sender": self.sender,
            "recipient": self.recipient,
            "amount": self.amount,
        }


@dataclass
class BallotTransition:
    """
    Outcome of the ballot state-transition function for one motion leaf.

    Attributes:
        previous_amount: Claimed current signed weight (10^18 scale)
        new_amount: Requested signed weight
        cost: Voice credits charged (never negative, no refunds)
        tally_credit: Tally tokens moved from the booth to the new pool
        tally_withdrawal: Tally tokens moved back from the previous pool
        old_leaf, new_leaf: Encoded leaves
        new_root: Root after the update (None for a quote)
    """

    previous_amount: int
    new_amount: int
    cost: int
    tally_credit: int
    tally_withdrawal: int
    old_leaf: bytes
    new_leaf: bytes
    previous_pool: Optional[str] = None
    new_pool: Optional[str] = None
    old_root: Optional[bytes] = None
    new_root: Optional[bytes] = None

    @property
    def previous_outcome(self) -> Outcome:
        return Outcome.of(self.previous_amount)

    @property
    def new_outcome(self) -> Outcome:
        return Outcome.of(self.new_amount)

    @property
    def is_sign_flip(self) -> bool:
        return self.previous_amount * self.new_amount < 0

    @property
    def tally_delta(self) -> int:
        """Signed change of the leaf, new - previous."""
        return self.new_amount - self.previous_amount

    def to_quote_dict(self) -> BallotQuoteDict:
        return {
            "previous_amount": self.previous_amount,
            "new_amount": self.new_amount,
            "previous_outcome": self.previous_outcome.value,
            "new_outcome": self.new_outcome.value,
            "cost": self.cost,
            "tally_credit": self.tally_credit,
            "tally_withdrawal": self.tally_withdrawal,
        }


@dataclass
class BallotReceipt:
    """Committed ballot: the transition plus who paid and what moved."""

    card_id: int
    motion_id: int
    voter: str
    transition: BallotTransition
    transfers: List[Transfer] = field(default_factory=list)

    @property
    def new_root(self) -> bytes:
        return self.transition.new_root

    def to_dict(self) -> BallotReceiptDict:
        return {
            "card_id": self.card_id,
            "motion_id": self.motion_id,
            "voter": self.voter,
            "previous_amount": self.transition.previous_amount,
            "new_amount": self.transition.new_amount,
            "cost": self.transition.cost,
            "old_root": "0x" + self.transition.old_root.hex(),
            "new_root": "0x" + self.transition.new_root.hex(),
            "transfers": [t.to_dict() for t in self.transfers],
        }
