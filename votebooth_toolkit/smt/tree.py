"""
Fixed-depth sparse Merkle tree over keccak256.

Leaves are stored raw (32 bytes) and the default leaf is 32 zero bytes.
Empty subtrees collapse: a node whose children are both zero is itself zero,
otherwise it is keccak256(left || right). The empty tree therefore has a
zero root at every depth, which is what an unwritten balance card holds.

Level 0 holds the leaves, level `depth` holds the root. At level `l` a node
is the left child iff bit `l` of its leaf index is 0.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Union

from eth_utils import keccak, to_bytes
from hexbytes import HexBytes

from votebooth_toolkit.shared.constants import BoothConstants
from votebooth_toolkit.shared.exceptions import (
    IndexOutOfRange,
    LeafEncodingError,
    ProofLengthMismatch,
    ProofMismatch,
)
from votebooth_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)

LeafLike = Union[bytes, bytearray, HexBytes, str]
IndexLike = Union[int, str]


# Default leaf, empty subtree and empty root at every level and depth
EMPTY_NODE = BoothConstants.ZERO_LEAF


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Parent node hash; two empty children make an empty parent."""
    if left == EMPTY_NODE and right == EMPTY_NODE:
        return EMPTY_NODE
    return keccak(left + right)


def to_leaf_bytes(value: LeafLike) -> bytes:
    """Normalize a leaf given as bytes or 0x-hex to exactly 32 bytes."""
    if isinstance(value, str):
        value = to_bytes(hexstr=value)
    value = bytes(value)
    if len(value) != BoothConstants.LEAF_SIZE:
        raise LeafEncodingError(
            f"Leaf must be {BoothConstants.LEAF_SIZE} bytes, got {len(value)}"
        )
    return value


def check_index(index: IndexLike, depth: int) -> int:
    """Accept an int or a base-10 string (JSON object keys) in [0, 2^depth)."""
    if isinstance(index, str):
        try:
            index = int(index, 10)
        except ValueError:
            raise IndexOutOfRange(f"Leaf index {index!r} is not an integer")
    elif isinstance(index, bool) or not isinstance(index, int):
        raise IndexOutOfRange(
            f"Leaf index must be an int, got {type(index).__name__}"
        )
    if not 0 <= index < 2**depth:
        raise IndexOutOfRange(
            f"Leaf index {index} outside [0, 2^{depth}) for depth {depth}"
        )
    return index


def check_proof(proof: Sequence[LeafLike], depth: int) -> List[bytes]:
    """Normalize proof siblings to bytes and enforce length == depth."""
    if len(proof) != depth:
        raise ProofLengthMismatch(
            f"Proof has {len(proof)} siblings, tree depth is {depth}"
        )
    siblings = []
    for level, sibling in enumerate(proof):
        try:
            siblings.append(to_leaf_bytes(sibling))
        except (LeafEncodingError, ValueError) as e:
            raise ProofLengthMismatch(
                f"Proof sibling at level {level} is malformed: {e}"
            )
    return siblings


def compute_root_from_proof(
    index: IndexLike, leaf: LeafLike, proof: Sequence[LeafLike], depth: int
) -> bytes:
    """Fold a leaf with its sibling path up to the root."""
    index = check_index(index, depth)
    siblings = check_proof(proof, depth)
    node = to_leaf_bytes(leaf)
    for sibling in siblings:
        if index % 2 == 0:
            node = hash_pair(node, sibling)
        else:
            node = hash_pair(sibling, node)
        index //= 2
    return node


def verify_and_compute_new_root(
    index: IndexLike,
    proof: Sequence[LeafLike],
    old_leaf: LeafLike,
    new_leaf: LeafLike,
    claimed_old_root: LeafLike,
    depth: int,
) -> bytes:
    """
    Authenticate `old_leaf` at `index` against `claimed_old_root` and return
    the root after replacing it with `new_leaf`.

    Siblings do not depend on the leaf being replaced, so one proof covers
    both folds.

    Raises:
        ProofMismatch: old leaf + proof do not reproduce the claimed root
        IndexOutOfRange, ProofLengthMismatch: malformed input
    """
    claimed = to_leaf_bytes(claimed_old_root)
    computed = compute_root_from_proof(index, old_leaf, proof, depth)
    if computed != claimed:
        raise ProofMismatch(
            f"Proof for index {index} does not match root "
            f"0x{claimed.hex()}",
            expected_root=claimed,
            computed_root=computed,
        )
    return compute_root_from_proof(index, new_leaf, proof, depth)


class SparseMerkleTree:
    """
    Client-side sparse Merkle tree.

    Only populated leaves and their ancestors are materialized; every other
    node is an empty (zero) subtree.

    Example:
        >>> tree = SparseMerkleTree(9, {5: "0x" + "00" * 24 + "1bc16d674ec80000"})
        >>> proof = tree.create_proof(5)
        >>> compute_root_from_proof(5, tree.get_leaf(5), proof, 9) == tree.root
        True
    """

    def __init__(
        self,
        depth: int = BoothConstants.DEFAULT_TREE_DEPTH,
        leaves: Optional[Mapping[IndexLike, LeafLike]] = None,
    ):
        if not 1 <= depth <= BoothConstants.MAX_TREE_DEPTH:
            raise ValueError(
                f"Tree depth must be between 1 and "
                f"{BoothConstants.MAX_TREE_DEPTH}, got {depth}"
            )
        self._depth = depth
        self._levels: List[Dict[int, bytes]] = [
            {} for _ in range(depth + 1)
        ]

        for index, value in (leaves or {}).items():
            index = check_index(index, depth)
            leaf = to_leaf_bytes(value)
            if leaf != EMPTY_NODE:
                self._levels[0][index] = leaf

        self._build()

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def root(self) -> bytes:
        return self._levels[self._depth].get(0, EMPTY_NODE)

    @property
    def root_hex(self) -> str:
        return "0x" + self.root.hex()

    @property
    def leaves(self) -> Dict[int, bytes]:
        """Non-default leaves by index."""
        return dict(self._levels[0])

    def _node(self, level: int, position: int) -> bytes:
        return self._levels[level].get(position, EMPTY_NODE)

    def _build(self):
        for level in range(self._depth):
            parents = {}
            for position in self._levels[level]:
                parent = position // 2
                if parent in parents:
                    continue
                left = self._node(level, parent * 2)
                right = self._node(level, parent * 2 + 1)
                parents[parent] = hash_pair(left, right)
            self._levels[level + 1] = parents

    def get_leaf(self, index: IndexLike) -> bytes:
        index = check_index(index, self._depth)
        return self._node(0, index)

    def create_proof(self, index: IndexLike) -> List[bytes]:
        """Sibling hashes from leaf `index` to the root, leaf first."""
        position = check_index(index, self._depth)
        proof = []
        for level in range(self._depth):
            proof.append(self._node(level, position ^ 1))
            position //= 2
        return proof

    def update(self, index: IndexLike, leaf: LeafLike) -> bytes:
        """Replace one leaf, recompute its path and return the new root."""
        position = check_index(index, self._depth)
        leaf = to_leaf_bytes(leaf)

        if leaf == EMPTY_NODE:
            self._levels[0].pop(position, None)
        else:
            self._levels[0][position] = leaf

        for level in range(self._depth):
            parent = position // 2
            left = self._node(level, parent * 2)
            right = self._node(level, parent * 2 + 1)
            node = hash_pair(left, right)
            if node == EMPTY_NODE:
                self._levels[level + 1].pop(parent, None)
            else:
                self._levels[level + 1][parent] = node
            position = parent

        _logger.debug("Leaf %s updated, root %s", index, self.root_hex)
        return self.root

    def verify_and_compute_new_root(
        self,
        index: IndexLike,
        proof: Sequence[LeafLike],
        old_leaf: LeafLike,
        new_leaf: LeafLike,
        claimed_old_root: LeafLike,
    ) -> bytes:
        """Proof-based transition for this tree's depth (tree not mutated)."""
        return verify_and_compute_new_root(
            index, proof, old_leaf, new_leaf, claimed_old_root, self._depth
        )

    @classmethod
    def compute_root(
        cls,
        leaves: Optional[Mapping[IndexLike, LeafLike]] = None,
        depth: int = BoothConstants.DEFAULT_TREE_DEPTH,
    ) -> bytes:
        return cls(depth, leaves).root

    def __repr__(self) -> str:
        return (
            f"SparseMerkleTree(depth={self._depth}, "
            f"leaves={len(self._levels[0])}, root={self.root_hex})"
        )
