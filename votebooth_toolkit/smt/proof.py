"""Proof wire formats: hex lists and the compact bitmap encoding"""

from typing import List, Sequence

from eth_utils import to_bytes

from votebooth_toolkit.shared.constants import BoothConstants
from votebooth_toolkit.shared.exceptions import ProofLengthMismatch
from votebooth_toolkit.smt.tree import EMPTY_NODE, LeafLike, check_proof

_BITMAP = BoothConstants.COMPRESSED_PROOF_BITMAP_BYTES
_WORD = BoothConstants.LEAF_SIZE


def _check_compact_depth(depth: int):
    if not 1 <= depth <= BoothConstants.COMPRESSED_PROOF_MAX_DEPTH:
        raise ProofLengthMismatch(
            f"Compact proofs support depth 1..."
            f"{BoothConstants.COMPRESSED_PROOF_MAX_DEPTH}, got {depth}"
        )


def compress_proof(proof: Sequence[LeafLike], depth: int) -> bytes:
    """
    Encode a full proof as bitmap || non-zero siblings.

    Bit `l` of the 8-byte big-endian bitmap is set when the level-`l`
    sibling is not an empty subtree; only those siblings follow, leaf first.
    """
    _check_compact_depth(depth)
    siblings = check_proof(proof, depth)
    bits = 0
    body = b""
    for level, sibling in enumerate(siblings):
        if sibling != EMPTY_NODE:
            bits |= 1 << level
            body += sibling
    return bits.to_bytes(_BITMAP, "big") + body


def decompress_proof(blob: LeafLike, depth: int) -> List[bytes]:
    """Inverse of compress_proof; zero siblings fill the unset levels."""
    _check_compact_depth(depth)
    if isinstance(blob, str):
        blob = to_bytes(hexstr=blob)
    blob = bytes(blob)

    if len(blob) < _BITMAP or (len(blob) - _BITMAP) % _WORD != 0:
        raise ProofLengthMismatch(
            f"Compact proof of {len(blob)} bytes is not bitmap + 32-byte words"
        )

    bits = int.from_bytes(blob[:_BITMAP], "big")
    if bits >> depth:
        raise ProofLengthMismatch(
            f"Compact proof bitmap sets levels beyond depth {depth}"
        )
    expected = bin(bits).count("1")
    words = (len(blob) - _BITMAP) // _WORD
    if words != expected:
        raise ProofLengthMismatch(
            f"Compact proof bitmap announces {expected} siblings, "
            f"found {words}"
        )

    proof = []
    offset = _BITMAP
    for level in range(depth):
        if bits & (1 << level):
            proof.append(blob[offset : offset + _WORD])
            offset += _WORD
        else:
            proof.append(EMPTY_NODE)
    return proof


def proof_to_hex(proof: Sequence[bytes]) -> List[str]:
    return ["0x" + bytes(sibling).hex() for sibling in proof]


def proof_from_hex(items: Sequence[str]) -> List[bytes]:
    return [to_bytes(hexstr=item) for item in items]
