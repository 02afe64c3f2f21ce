"""
Voting booth: the cast-ballot call surface for one motion.

A ballot is settled atomically. The proof is verified and every ledger and
card precondition is checked before the first transfer runs, so a rejected
ballot leaves the card root and all ledgers exactly as they were. If a
ledger fails part way through settlement anyway, the transfers already made
are reversed before the error propagates.
"""

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator, List, Sequence, Tuple

from votebooth_toolkit.ballot.consolidation import (
    ConsolidationGuard,
    SignaturePart,
)
from votebooth_toolkit.ballot.engine import BallotEngine
from votebooth_toolkit.ballot.models import (
    Asset,
    BallotReceipt,
    BallotTransition,
    Transfer,
)
from votebooth_toolkit.shared.config import BoothConfig
from votebooth_toolkit.shared.exceptions import (
    CardNotAuthorized,
    InsufficientTally,
    InsufficientVoiceCredits,
    LedgerException,
    NonRetryableException,
)
from votebooth_toolkit.shared.logging import get_logger
from votebooth_toolkit.shared.results import (
    ErrorSeverity,
    ProcessingError,
    Result,
)
from votebooth_toolkit.smt.tree import LeafLike

_logger = get_logger(__name__)


class VotingBooth:
    """
    Quadratic voting booth bound to one motion.

    Args:
        config: Deployment configuration
        voice_credits: Ledger charged for votes (balance_of, allowance,
            transfer, transfer_from)
        tallies: Ledger of tally tokens held by the booth and its pools
        cards: Balance card token (owner_of, read_data, write_data,
            is_authorized)
    """

    def __init__(self, config: BoothConfig, voice_credits, tallies, cards):
        self.config = config
        self.engine = BallotEngine(config)
        self.guard = ConsolidationGuard(config)
        self.voice_credits = voice_credits
        self.tallies = tallies
        self.cards = cards
        # card_id -> [lock, holders + waiters]
        self._locks: Dict[int, list] = {}
        self._locks_guard = threading.Lock()

    @property
    def address(self) -> str:
        return self.config.booth_address

    @property
    def motion_id(self) -> int:
        return self.config.motion_id

    @contextmanager
    def _card_lock(self, card_id: int) -> Iterator[None]:
        """Serialize casts on one card; the entry is dropped once unused."""
        with self._locks_guard:
            entry = self._locks.setdefault(card_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[card_id]

    def _ledger(self, asset: Asset):
        if asset == Asset.VOICE_CREDITS:
            return self.voice_credits
        return self.tallies

    def card_root(self, card_id: int) -> bytes:
        """Current root of a card's tree (zero for a card never written)."""
        return bytes(self.cards.read_data(card_id))

    def quote(self, previous_amount: int, new_amount: int) -> BallotTransition:
        """Price a change without touching any state."""
        return self.engine.plan(previous_amount, new_amount)

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def _preflight(self, card_id: int, transfers: List[Transfer]) -> None:
        """
        Replay the transfers against current balances and allowances.

        Raises:
            InsufficientVoiceCredits: voter balance or allowance too low
            InsufficientTally: pool or booth cannot cover a tally movement
            CardNotAuthorized: booth may not write the card payload
        """
        booth = self.address
        if not self.cards.is_authorized(booth, card_id):
            raise CardNotAuthorized(
                f"Booth {booth} is not approved for card {card_id}"
            )

        balances: Dict[Tuple[Asset, str], int] = {}
        spent: Dict[Tuple[Asset, str], int] = defaultdict(int)

        for t in transfers:
            ledger = self._ledger(t.asset)
            short = (
                InsufficientVoiceCredits
                if t.asset == Asset.VOICE_CREDITS
                else InsufficientTally
            )
            key = (t.asset, t.sender)
            if key not in balances:
                balances[key] = ledger.balance_of(t.sender)
            if balances[key] < t.amount:
                raise short(
                    f"{t.sender} holds {balances[key]} {t.asset.value}, "
                    f"ballot needs {t.amount}"
                )
            if t.sender != booth:
                spent[key] += t.amount
                allowance = ledger.allowance(t.sender, booth)
                if allowance < spent[key]:
                    raise short(
                        f"{t.sender} approved {allowance} {t.asset.value} "
                        f"to the booth, ballot needs {spent[key]}"
                    )
            balances[key] -= t.amount
            credit = (t.asset, t.recipient)
            if credit not in balances:
                balances[credit] = ledger.balance_of(t.recipient)
            balances[credit] += t.amount

    def _execute(self, t: Transfer) -> None:
        booth = self.address
        ledger = self._ledger(t.asset)
        if t.sender == booth:
            ledger.transfer(booth, t.recipient, t.amount)
        else:
            ledger.transfer_from(booth, t.sender, t.recipient, t.amount)

    def _settle(
        self, card_id: int, transfers: List[Transfer], new_root: bytes
    ) -> None:
        """
        Run the transfers in order, then write the card.

        On any failure the transfers already made are replayed in reverse
        with sender and recipient swapped, and the error is re-raised.
        """
        done: List[Transfer] = []
        try:
            for t in transfers:
                self._execute(t)
                done.append(t)
            self.cards.write_data(self.address, card_id, new_root)
        except Exception:
            _logger.error(
                "Settlement of card %s failed after %s of %s transfers, "
                "reversing",
                card_id,
                len(done),
                len(transfers),
            )
            for t in reversed(done):
                self._execute(t.reversed())
            raise

    def cast_ballot_or_raise(
        self,
        card_id: int,
        proof: Sequence[LeafLike],
        previous_amount: int,
        new_amount: int,
    ) -> BallotReceipt:
        """
        Move a card's vote on this motion from `previous_amount` to
        `new_amount` (signed, 10^18 scale).

        Raises:
            StaleProof: claim does not match the card's recorded root
            IndexOutOfRange, ProofLengthMismatch: malformed proof
            InsufficientVoiceCredits, InsufficientTally: ledger preconditions
            CardNotAuthorized, UnknownCard: card problems
            LeafEncodingError: amount outside int256
        """
        with self._card_lock(card_id):
            voter = self.cards.owner_of(card_id)
            old_root = self.card_root(card_id)
            transition = self.engine.apply(
                old_root, proof, previous_amount, new_amount
            )
            transfers = self.engine.transfers(transition, voter)
            self._preflight(card_id, transfers)

            self._settle(card_id, transfers, transition.new_root)

        _logger.info(
            "Card %s motion %s: %s -> %s, cost %s, root 0x%s",
            card_id,
            self.motion_id,
            previous_amount,
            new_amount,
            transition.cost,
            transition.new_root.hex(),
        )
        return BallotReceipt(
            card_id=card_id,
            motion_id=self.motion_id,
            voter=voter,
            transition=transition,
            transfers=transfers,
        )

    def cast_ballot(
        self,
        card_id: int,
        proof: Sequence[LeafLike],
        previous_amount: int,
        new_amount: int,
    ) -> Result[BallotReceipt]:
        """
        Cast or amend a ballot.

        Returns:
            Result[BallotReceipt]: Success with the receipt, or failure whose
            `reason` names the exception (e.g. "StaleProof")
        """
        context = {
            "card_id": card_id,
            "motion_id": self.motion_id,
            "previous_amount": previous_amount,
            "new_amount": new_amount,
        }
        try:
            return Result.ok(
                self.cast_ballot_or_raise(
                    card_id, proof, previous_amount, new_amount
                )
            )
        except NonRetryableException as e:
            _logger.warning(
                "Ballot rejected for card %s: %s", card_id, e.message
            )
            # Ledger failures past preflight mean a collaborator changed
            # state underneath us
            severity = ErrorSeverity.ERROR
            if isinstance(e, LedgerException) and not isinstance(
                e, (InsufficientVoiceCredits, InsufficientTally)
            ):
                severity = ErrorSeverity.CRITICAL
            return Result.fail(
                ProcessingError(
                    source="cast_ballot",
                    message=f"Ballot rejected: {e.message}",
                    severity=severity,
                    context=context,
                    exception=e,
                )
            )

    def consolidate(
        self, ledger, v: int, r: SignaturePart, s: SignaturePart
    ) -> int:
        """Signature-authorized sweep of the booth's balance on `ledger`."""
        return self.guard.consolidate(ledger, v, r, s)
