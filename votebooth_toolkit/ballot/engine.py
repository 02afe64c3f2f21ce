"""
Ballot state transition for one motion leaf.

Given the amount a voter claims to hold on the motion and the amount it
wants, the engine authenticates the claim against the card root, prices the
change quadratically and decides where voice credits and tally tokens go.
It never touches a ledger; the booth settles the transfers it returns.

Pricing:
    cost = max(0, new^2 - previous^2) / 10^18

Tally routing:
    same direction (or from/to zero): |new| - |previous| moves between the
    booth and the pool of that direction (credit when positive, withdrawal
    when negative).
    direction flip: |previous| is withdrawn from the old pool and |new| is
    credited to the new pool, both in the same ballot.
"""

from typing import List, Sequence, Tuple

from votebooth_toolkit.ballot.codec import encode_leaf
from votebooth_toolkit.ballot.models import Asset, BallotTransition, Transfer
from votebooth_toolkit.shared.config import BoothConfig
from votebooth_toolkit.shared.constants import BoothConstants
from votebooth_toolkit.shared.exceptions import ProofMismatch, StaleProof
from votebooth_toolkit.shared.logging import get_logger
from votebooth_toolkit.smt.tree import (
    LeafLike,
    to_leaf_bytes,
    verify_and_compute_new_root,
)

_logger = get_logger(__name__)


def quadratic_cost(previous_amount: int, new_amount: int) -> int:
    """Marginal voice-credit charge; reductions cost nothing and refund nothing."""
    marginal = new_amount * new_amount - previous_amount * previous_amount
    if marginal <= 0:
        return 0
    return marginal // BoothConstants.FIXED_POINT_SCALE


def tally_movements(previous_amount: int, new_amount: int) -> Tuple[int, int]:
    """(credit to the new pool, withdrawal from the previous pool)"""
    if previous_amount * new_amount < 0:
        return abs(new_amount), abs(previous_amount)
    diff = abs(new_amount) - abs(previous_amount)
    return max(diff, 0), max(-diff, 0)


class BallotEngine:
    """Stateless ballot pricing and proof-verified leaf transition."""

    def __init__(self, config: BoothConfig):
        self.config = config

    @property
    def motion_id(self) -> int:
        return self.config.motion_id

    @staticmethod
    def price(previous_amount: int, new_amount: int) -> BallotTransition:
        """
        Price a change without looking at any root or pool.

        Raises:
            LeafEncodingError: an amount does not fit int256
        """
        old_leaf = encode_leaf(previous_amount)
        new_leaf = encode_leaf(new_amount)
        tally_credit, tally_withdrawal = tally_movements(
            previous_amount, new_amount
        )
        return BallotTransition(
            previous_amount=previous_amount,
            new_amount=new_amount,
            cost=quadratic_cost(previous_amount, new_amount),
            tally_credit=tally_credit,
            tally_withdrawal=tally_withdrawal,
            old_leaf=old_leaf,
            new_leaf=new_leaf,
        )

    def plan(self, previous_amount: int, new_amount: int) -> BallotTransition:
        """Price a change and route it to this booth's pools."""
        transition = self.price(previous_amount, new_amount)
        transition.previous_pool = self.config.pool_for(previous_amount)
        transition.new_pool = self.config.pool_for(new_amount)
        return transition

    def apply(
        self,
        card_root: LeafLike,
        proof: Sequence[LeafLike],
        previous_amount: int,
        new_amount: int,
    ) -> BallotTransition:
        """
        Verify the claimed previous amount against `card_root` and compute
        the root holding `new_amount` at this motion's leaf.

        Raises:
            StaleProof: claim and proof do not reproduce `card_root`
            IndexOutOfRange, ProofLengthMismatch: malformed proof input
            LeafEncodingError: an amount does not fit int256
        """
        transition = self.plan(previous_amount, new_amount)
        old_root = to_leaf_bytes(card_root)

        try:
            new_root = verify_and_compute_new_root(
                self.motion_id,
                proof,
                transition.old_leaf,
                transition.new_leaf,
                old_root,
                self.config.tree_depth,
            )
        except ProofMismatch as e:
            raise StaleProof(
                f"Stale proof for motion {self.motion_id}: previous amount "
                f"{previous_amount} is not on record under root "
                f"0x{old_root.hex()}",
                expected_root=e.expected_root,
                computed_root=e.computed_root,
            ) from e

        transition.old_root = old_root
        transition.new_root = new_root
        _logger.debug(
            "Motion %s leaf %s -> %s, root 0x%s -> 0x%s",
            self.motion_id,
            previous_amount,
            new_amount,
            old_root.hex(),
            new_root.hex(),
        )
        return transition

    def transfers(
        self, transition: BallotTransition, voter: str
    ) -> List[Transfer]:
        """
        Ledger movements for a transition, in settlement order.

        Withdrawals come before credits so tally returned by the old pool can
        fund the new pool within one ballot.
        """
        booth = self.config.booth_address
        out = []
        if transition.cost:
            out.append(
                Transfer(
                    asset=Asset.VOICE_CREDITS,
                    sender=voter,
                    recipient=transition.new_pool,
                    amount=transition.cost,
                )
            )
        if transition.tally_withdrawal:
            out.append(
                Transfer(
                    asset=Asset.TALLY,
                    sender=transition.previous_pool,
                    recipient=booth,
                    amount=transition.tally_withdrawal,
                )
            )
        if transition.tally_credit:
            out.append(
                Transfer(
                    asset=Asset.TALLY,
                    sender=booth,
                    recipient=transition.new_pool,
                    amount=transition.tally_credit,
                )
            )
        return out
