"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

from dataclasses import dataclass
from typing import Callable

import pytest
from eth_keys import keys

from votebooth_toolkit.ballot.booth import VotingBooth
from votebooth_toolkit.ledgers.cards import BalanceCards
from votebooth_toolkit.ledgers.token import TokenLedger
from votebooth_toolkit.shared.config import BoothConfig

E18 = 10**18

VOICE_BUDGET = 400 * E18
TOTAL_VOTES = 400 * E18
BALANCE_CARD_ID = 123

VOTER_PRIVATE_KEY = (
    "2bdd21761a483f71054e14f5b827213567971c676928d9a1808cbfa4b7501201"
)


@dataclass
class BoothSetup:
    """A booth wired to funded in-memory collaborators."""

    booth: VotingBooth
    config: BoothConfig
    voice_credits: TokenLedger
    tallies: TokenLedger
    cards: BalanceCards
    voter: str
    card_id: int


@pytest.fixture
def voter_key() -> keys.PrivateKey:
    """Private key of the voter (also the authorized consolidator)."""
    return keys.PrivateKey(bytes.fromhex(VOTER_PRIVATE_KEY))


@pytest.fixture
def voter(voter_key) -> str:
    return voter_key.public_key.to_checksum_address()


@pytest.fixture
def addresses():
    """Deployment addresses for the booth and its collaborators."""
    return {
        "booth": "0x" + "b0" * 20,
        "voice_credits": "0x" + "c1" * 20,
        "tally": "0x" + "7a" * 20,
        "cards": "0x" + "ca" * 20,
        "yes_pool": "0x" + "e5" * 20,
        "no_pool": "0x" + "40" * 20,
    }


@pytest.fixture
def make_config(addresses, voter) -> Callable[..., BoothConfig]:
    def _make(motion_id: int = 0, **overrides) -> BoothConfig:
        params = dict(
            booth_address=addresses["booth"],
            voice_credits_address=addresses["voice_credits"],
            tally_address=addresses["tally"],
            cards_address=addresses["cards"],
            yes_pool=addresses["yes_pool"],
            no_pool=addresses["no_pool"],
            motion_id=motion_id,
            authorized_address=voter,
        )
        params.update(overrides)
        return BoothConfig(**params)

    return _make


@pytest.fixture
def make_booth(make_config, voter) -> Callable[..., BoothSetup]:
    """
    Build a booth for a motion, funded like a fresh deployment.

    The voter holds the voice budget and has approved the booth for it and
    for its card; the booth holds every tally token; both pools allow the
    booth to pull tallies and voice credits back.
    """

    def _make(
        motion_id: int = 0,
        voice_budget: int = VOICE_BUDGET,
        credit_allowance: int = VOICE_BUDGET,
        approve_card: bool = True,
        pools_approve: bool = True,
    ) -> BoothSetup:
        config = make_config(motion_id)
        voice_credits = TokenLedger(config.voice_credits_address, "VOICE")
        tallies = TokenLedger(config.tally_address, "VOTES")
        cards = BalanceCards(config.cards_address)

        voice_credits.mint(voter, voice_budget)
        tallies.mint(config.booth_address, TOTAL_VOTES)
        cards.mint(voter, BALANCE_CARD_ID)

        if approve_card:
            cards.approve(voter, config.booth_address, BALANCE_CARD_ID)
        voice_credits.approve(voter, config.booth_address, credit_allowance)
        if pools_approve:
            for pool in (config.yes_pool, config.no_pool):
                tallies.approve(pool, config.booth_address, TOTAL_VOTES)
                voice_credits.approve(pool, config.booth_address, voice_budget)

        return BoothSetup(
            booth=VotingBooth(config, voice_credits, tallies, cards),
            config=config,
            voice_credits=voice_credits,
            tallies=tallies,
            cards=cards,
            voter=voter,
            card_id=BALANCE_CARD_ID,
        )

    return _make


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow-running")
