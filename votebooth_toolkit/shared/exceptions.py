"""
Exception hierarchy for the Voting Booth toolkit.

Exception Categories:
- NonRetryableException: Every failure raised here. A ballot that failed
  verification or settlement will fail again until the caller fixes its
  input (usually by regenerating the proof), so nothing is retried.
- ConfigurationException: Startup/config errors that prevent operation

Domain exceptions:
- MerkleProofException -> proof/index problems raised by the tree layer
- LedgerException -> collaborator ledger preconditions (balances, allowances)
- CardException -> balance card lookups and write authorization
- UnauthorizedSigner -> consolidation signature did not recover the
  authorized address
"""


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Invalid input data
    - Stale or forged proofs
    - Ledger preconditions not met
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are missing
    - Invalid configuration values (bad address, motion outside the tree)
    """

    pass


# =============================================================================
# MERKLE TREE
# =============================================================================


class MerkleProofException(NonRetryableException):
    """Base class for malformed or non-matching Merkle proofs."""

    pass


class ProofMismatch(MerkleProofException):
    """The proof folded with the claimed leaf does not reproduce the root."""

    def __init__(
        self,
        message: str,
        expected_root: bytes = b"",
        computed_root: bytes = b"",
    ):
        super().__init__(message)
        self.expected_root = expected_root
        self.computed_root = computed_root


class StaleProof(ProofMismatch):
    """
    The claimed previous amount and proof do not match the card's root.

    Raised by the ballot layer. Either the caller lied about its previous
    amount or the proof was generated against an outdated root.
    """

    pass


class IndexOutOfRange(MerkleProofException):
    """Leaf index outside [0, 2^depth)."""

    pass


class ProofLengthMismatch(MerkleProofException):
    """Proof does not hold exactly `depth` 32-byte siblings."""

    pass


class LeafEncodingError(NonRetryableException):
    """Value cannot be represented as a signed 256-bit leaf."""

    pass


# =============================================================================
# LEDGERS & CARDS
# =============================================================================


class LedgerException(NonRetryableException):
    """Base class for token ledger precondition failures."""

    pass


class InsufficientBalance(LedgerException):
    pass


class InsufficientAllowance(LedgerException):
    pass


class InsufficientVoiceCredits(LedgerException):
    """The voter cannot cover the marginal quadratic cost."""

    pass


class InsufficientTally(LedgerException):
    """A pool cannot return the tally tokens a reduced ballot withdraws."""

    pass


class CardException(NonRetryableException):
    """Base class for balance card failures."""

    pass


class UnknownCard(CardException):
    pass


class CardNotAuthorized(CardException):
    """Sender is neither the card owner nor its approved operator."""

    pass


# =============================================================================
# CONSOLIDATION
# =============================================================================


class UnauthorizedSigner(NonRetryableException):
    """Consolidation signature did not recover the authorized address."""

    pass
