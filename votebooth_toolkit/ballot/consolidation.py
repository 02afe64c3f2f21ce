"""
Signature-authorized sweep of residual booth funds.

The authorized key signs (raw secp256k1, no message prefix) a 32-byte word
holding the booth address right-aligned. Whoever submits that signature can
move the booth's whole balance on a ledger to the authorized address.
"""

from typing import Union

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import big_endian_to_int, to_bytes, to_canonical_address

from votebooth_toolkit.shared.config import BoothConfig
from votebooth_toolkit.shared.exceptions import UnauthorizedSigner
from votebooth_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)

SignaturePart = Union[int, bytes, str]


def consolidation_message(contract_address: str) -> bytes:
    """Booth address right-aligned in a zeroed 32-byte buffer."""
    return b"\x00" * 12 + to_canonical_address(contract_address)


def signature_part_to_int(part: SignaturePart) -> int:
    if isinstance(part, int):
        return part
    if isinstance(part, str):
        part = to_bytes(hexstr=part)
    return big_endian_to_int(bytes(part))


def recover_signer(
    message: bytes, v: int, r: SignaturePart, s: SignaturePart
) -> str:
    """
    Recover the checksum address that signed the raw 32-byte `message`.

    `v` may be given as 0/1 or in the 27/28 form.

    Raises:
        UnauthorizedSigner: signature components are malformed
    """
    v = int(v)
    if v >= 27:
        v -= 27
    try:
        signature = keys.Signature(
            vrs=(v, signature_part_to_int(r), signature_part_to_int(s))
        )
        public_key = signature.recover_public_key_from_msg_hash(message)
    except (BadSignature, ValidationError, ValueError) as e:
        raise UnauthorizedSigner(f"Signature cannot be recovered: {e}")
    return public_key.to_checksum_address()


class ConsolidationGuard:
    """Capability check for the consolidation sweep."""

    def __init__(self, config: BoothConfig):
        self.config = config

    @property
    def message(self) -> bytes:
        return consolidation_message(self.config.booth_address)

    def check(self, v: int, r: SignaturePart, s: SignaturePart) -> str:
        """Return the signer if it is the authorized address, else raise."""
        signer = recover_signer(self.message, v, r, s)
        if signer != self.config.authorized_address:
            raise UnauthorizedSigner(
                f"Signer {signer} is not the authorized consolidator"
            )
        return signer

    def consolidate(
        self, ledger, v: int, r: SignaturePart, s: SignaturePart
    ) -> int:
        """
        Sweep the booth's full balance on `ledger` to the authorized address.

        Args:
            ledger: Token ledger exposing balance_of and transfer
            v, r, s: Signature over the consolidation message

        Returns:
            int: Amount swept
        """
        signer = self.check(v, r, s)
        booth = self.config.booth_address
        amount = ledger.balance_of(booth)
        if amount:
            ledger.transfer(booth, signer, amount)
        _logger.info(
            "Consolidated %s of ledger %s to %s",
            amount,
            getattr(ledger, "address", "?"),
            signer,
        )
        return amount
