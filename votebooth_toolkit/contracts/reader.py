"""
Read balance card state from chain and build booth calldata.

Raw eth_call + eth_abi decoding; no ABI files are needed for the handful of
functions a booth client touches.
"""

from typing import Sequence

from eth_abi import decode, encode
from eth_utils import (
    function_signature_to_4byte_selector,
    to_checksum_address,
)
from web3 import Web3

from votebooth_toolkit.ballot.consolidation import (
    SignaturePart,
    signature_part_to_int,
)
from votebooth_toolkit.shared.constants import BoothConstants
from votebooth_toolkit.shared.logging import get_logger
from votebooth_toolkit.smt.proof import compress_proof
from votebooth_toolkit.smt.tree import LeafLike

_logger = get_logger(__name__)

READ_DATA = "readData(uint256)"
OWNER_OF = "ownerOf(uint256)"
BALANCE_OF = "balanceOf(address)"
CAST_BALLOT = "castBallot(uint256,bytes,int256,int256)"
CONSOLIDATE = "consolidate(address,uint8,bytes32,bytes32)"


def _calldata(signature: str, types: Sequence[str], args: Sequence) -> str:
    selector = function_signature_to_4byte_selector(signature)
    return "0x" + (selector + encode(list(types), list(args))).hex()


def encode_cast_ballot(
    card_id: int,
    proof: Sequence[LeafLike],
    previous_amount: int,
    new_amount: int,
    depth: int = BoothConstants.DEFAULT_TREE_DEPTH,
) -> str:
    """castBallot calldata with the proof in compact bitmap form"""
    return _calldata(
        CAST_BALLOT,
        ["uint256", "bytes", "int256", "int256"],
        [card_id, compress_proof(proof, depth), previous_amount, new_amount],
    )


def encode_consolidate(
    token_address: str, v: int, r: SignaturePart, s: SignaturePart
) -> str:
    v = int(v)
    return _calldata(
        CONSOLIDATE,
        ["address", "uint8", "bytes32", "bytes32"],
        [
            to_checksum_address(token_address),
            v if v >= 27 else v + 27,
            signature_part_to_int(r).to_bytes(32, "big"),
            signature_part_to_int(s).to_bytes(32, "big"),
        ],
    )


class BoothContractReader:
    """
    Reader for the on-chain card token and ledgers a booth works with.

    Example:
        >>> reader = BoothContractReader.from_rpc_url("https://rpc...")
        >>> root = reader.read_card_root("0xCards...", 123)
    """

    def __init__(self, w3: Web3):
        self.w3 = w3

    @classmethod
    def from_rpc_url(cls, rpc_url: str) -> "BoothContractReader":
        return cls(Web3(Web3.HTTPProvider(rpc_url)))

    def _call(
        self,
        to: str,
        signature: str,
        types: Sequence[str],
        args: Sequence,
        out: str,
    ):
        raw = self.w3.eth.call(
            {
                "to": to_checksum_address(to),
                "data": _calldata(signature, types, args),
            }
        )
        return decode([out], bytes(raw))[0]

    def read_card_root(self, cards_address: str, card_id: int) -> bytes:
        """Raw 32-byte payload of a card (zero until first written)."""
        root = self._call(
            cards_address, READ_DATA, ["uint256"], [card_id], "bytes32"
        )
        _logger.debug("Card %s payload 0x%s", card_id, root.hex())
        return root

    def read_card_owner(self, cards_address: str, card_id: int) -> str:
        owner = self._call(
            cards_address, OWNER_OF, ["uint256"], [card_id], "address"
        )
        return to_checksum_address(owner)

    def read_balance(self, token_address: str, account: str) -> int:
        return self._call(
            token_address,
            BALANCE_OF,
            ["address"],
            [to_checksum_address(account)],
            "uint256",
        )
