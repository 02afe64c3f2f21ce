"""
Deployment configuration for a voting booth instance.

A booth is bound at construction time to its collaborators (token ledgers,
card token, outcome pools) and to the motion it tallies. Everything here is
immutable once built.
"""

import os
from dataclasses import dataclass
from typing import Optional

from eth_utils import is_address, to_checksum_address

from votebooth_toolkit.shared.constants import BoothConstants, EnvVars
from votebooth_toolkit.shared.exceptions import ConfigurationException


def _checksum(value: Optional[str], name: str) -> str:
    if not value:
        raise ConfigurationException(f"Missing address for {name}")
    if not is_address(value):
        raise ConfigurationException(
            f"Invalid {name}: {value} is not a valid Ethereum address"
        )
    return to_checksum_address(value)


@dataclass(frozen=True)
class BoothConfig:
    """
    Immutable booth configuration.

    Attributes:
        booth_address: Address of the booth itself (holds tally tokens,
            spends approvals, signs nothing)
        voice_credits_address: Voice credit token ledger
        tally_address: Tally token ledger
        cards_address: Balance card token
        yes_pool: Account receiving YES credits and tallies
        no_pool: Account receiving NO credits and tallies
        motion_id: Leaf index of this motion in every voter's tree
        authorized_address: Signer allowed to consolidate residual funds
        tree_depth: Depth of the per-card sparse Merkle tree
    """

    booth_address: str
    voice_credits_address: str
    tally_address: str
    cards_address: str
    yes_pool: str
    no_pool: str
    motion_id: int
    authorized_address: str = BoothConstants.ZERO_ADDRESS
    tree_depth: int = BoothConstants.DEFAULT_TREE_DEPTH

    def __post_init__(self):
        for name in (
            "booth_address",
            "voice_credits_address",
            "tally_address",
            "cards_address",
            "yes_pool",
            "no_pool",
            "authorized_address",
        ):
            # frozen dataclass: normalize through object.__setattr__
            object.__setattr__(
                self, name, _checksum(getattr(self, name), name)
            )

        if not 1 <= self.tree_depth <= BoothConstants.MAX_TREE_DEPTH:
            raise ConfigurationException(
                f"Invalid tree_depth: {self.tree_depth}. "
                f"Must be between 1 and {BoothConstants.MAX_TREE_DEPTH}"
            )
        if not 0 <= self.motion_id < 2**self.tree_depth:
            raise ConfigurationException(
                f"Invalid motion_id: {self.motion_id} does not fit a tree "
                f"of depth {self.tree_depth}"
            )
        if self.yes_pool == self.no_pool:
            raise ConfigurationException(
                "YES and NO pools must be distinct accounts"
            )

    @classmethod
    def from_env(cls) -> "BoothConfig":
        """Build a config from VB_* environment variables (.env supported)."""

        def _int(var: str, default: Optional[int] = None) -> int:
            raw = os.getenv(var)
            if raw is None or raw == "":
                if default is None:
                    raise ConfigurationException(f"{var} is not set")
                return default
            try:
                return int(raw, 0)
            except ValueError:
                raise ConfigurationException(
                    f"{var} must be an integer, got {raw!r}"
                )

        return cls(
            booth_address=os.getenv(EnvVars.BOOTH_ADDRESS),
            voice_credits_address=os.getenv(EnvVars.VOICE_CREDITS_ADDRESS),
            tally_address=os.getenv(EnvVars.TALLY_ADDRESS),
            cards_address=os.getenv(EnvVars.CARDS_ADDRESS),
            yes_pool=os.getenv(EnvVars.YES_POOL_ADDRESS),
            no_pool=os.getenv(EnvVars.NO_POOL_ADDRESS),
            motion_id=_int(EnvVars.MOTION_ID),
            authorized_address=os.getenv(
                EnvVars.AUTHORIZED_ADDRESS, BoothConstants.ZERO_ADDRESS
            ),
            tree_depth=_int(
                EnvVars.TREE_DEPTH, BoothConstants.DEFAULT_TREE_DEPTH
            ),
        )

    def pool_for(self, amount: int) -> Optional[str]:
        """Outcome pool for a signed amount (None for zero)."""
        if amount > 0:
            return self.yes_pool
        if amount < 0:
            return self.no_pool
        return None
