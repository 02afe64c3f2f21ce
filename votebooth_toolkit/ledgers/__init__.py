from votebooth_toolkit.ledgers.cards import BalanceCards
from votebooth_toolkit.ledgers.token import TokenLedger

__all__ = ["BalanceCards", "TokenLedger"]
