"""Voting Booth Toolkit - sparse Merkle ballot cards and quadratic voting."""

__version__ = "0.1.0"

from .ballot import BallotEngine, VotingBooth
from .smt import SparseMerkleTree

__all__ = ["BallotEngine", "VotingBooth", "SparseMerkleTree"]
