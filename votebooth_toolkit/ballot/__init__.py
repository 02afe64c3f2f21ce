from votebooth_toolkit.ballot.booth import VotingBooth
from votebooth_toolkit.ballot.codec import (
    decode_leaf,
    encode_leaf,
    from_fixed_point,
    to_fixed_point,
)
from votebooth_toolkit.ballot.consolidation import (
    ConsolidationGuard,
    consolidation_message,
    recover_signer,
)
from votebooth_toolkit.ballot.engine import BallotEngine, quadratic_cost
from votebooth_toolkit.ballot.models import (
    BallotReceipt,
    BallotTransition,
    Outcome,
    Transfer,
)

__all__ = [
    "VotingBooth",
    "BallotEngine",
    "ConsolidationGuard",
    "BallotReceipt",
    "BallotTransition",
    "Outcome",
    "Transfer",
    "encode_leaf",
    "decode_leaf",
    "to_fixed_point",
    "from_fixed_point",
    "quadratic_cost",
    "consolidation_message",
    "recover_signer",
]
