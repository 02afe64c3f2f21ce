"""
Unit tests for the sparse Merkle tree.
"""

import pytest
from eth_utils import keccak

from votebooth_toolkit.shared.constants import BoothConstants
from votebooth_toolkit.shared.exceptions import (
    IndexOutOfRange,
    LeafEncodingError,
    MerkleProofException,
    ProofLengthMismatch,
    ProofMismatch,
)
from votebooth_toolkit.smt.tree import (
    EMPTY_NODE,
    SparseMerkleTree,
    check_index,
    compute_root_from_proof,
    hash_pair,
    verify_and_compute_new_root,
)

ZERO = BoothConstants.ZERO_LEAF
TWO = "0x0000000000000000000000000000000000000000000000001bc16d674ec80000"
THREE = "0x00000000000000000000000000000000000000000000000029a2241af62c0000"


def leaf(n: int) -> bytes:
    return n.to_bytes(32, "big")


class TestEmptySubtrees:
    """Tests for the zero-collapse of empty subtrees."""

    def test_empty_root_is_zero_at_every_depth(self):
        for depth in (1, 9, 64, BoothConstants.MAX_TREE_DEPTH):
            assert SparseMerkleTree(depth).root == ZERO
        assert EMPTY_NODE == ZERO

    def test_hash_pair_of_two_zeros_is_zero(self):
        assert hash_pair(ZERO, ZERO) == ZERO

    def test_hash_pair_with_one_nonzero_child_hashes(self):
        assert hash_pair(leaf(1), ZERO) == keccak(leaf(1) + ZERO)
        assert hash_pair(ZERO, leaf(1)) == keccak(ZERO + leaf(1))

    def test_hash_pair_order_matters(self):
        assert hash_pair(leaf(1), leaf(2)) != hash_pair(leaf(2), leaf(1))

    def test_zero_leaf_folds_to_zero_root(self):
        """An unwritten card (zero root) authenticates a zero leaf."""
        proof = SparseMerkleTree(9).create_proof(0)
        assert compute_root_from_proof(0, ZERO, proof, 9) == ZERO

    def test_single_leaf_root(self):
        """Only the leaf's own path is hashed; empty siblings stay zero."""
        node = leaf(3)
        for _ in range(9):
            node = keccak(node + ZERO)
        assert SparseMerkleTree(9, {0: leaf(3)}).root == node


class TestComputeRoot:
    """Tests for building trees from leaf maps."""

    def test_explicit_zero_leaves_match_absent_leaves(self):
        """Leaves written as zero are indistinguishable from unset ones."""
        with_zeros = SparseMerkleTree(
            9, {0: TWO, 1: "0x" + "00" * 32, 2: ZERO, 3: "0x" + "00" * 32}
        )
        without = SparseMerkleTree(9, {0: TWO})
        assert with_zeros.root == without.root
        assert with_zeros.leaves == {0: bytes.fromhex(TWO[2:])}

    def test_depth_one_ordering(self):
        """Index 0 is the left child, index 1 the right."""
        tree = SparseMerkleTree(1, {0: leaf(1), 1: leaf(2)})
        assert tree.root == keccak(leaf(1) + leaf(2))

    def test_depth_two_manual_fold(self):
        tree = SparseMerkleTree(2, {2: leaf(7)})
        right = keccak(leaf(7) + ZERO)
        assert tree.root == keccak(ZERO + right)

    def test_single_leaf_changes_root(self):
        assert SparseMerkleTree(9, {5: TWO}).root != ZERO

    def test_string_keys_accepted(self):
        assert (
            SparseMerkleTree(9, {"5": TWO}).root
            == SparseMerkleTree(9, {5: TWO}).root
        )

    def test_compute_root_classmethod(self):
        leaves = {5: TWO, 7: TWO}
        assert (
            SparseMerkleTree.compute_root(leaves, 9)
            == SparseMerkleTree(9, leaves).root
        )

    def test_hex_case_insensitive(self):
        assert (
            SparseMerkleTree(9, {0: THREE.upper().replace("0X", "0x")}).root
            == SparseMerkleTree(9, {0: THREE}).root
        )

    def test_invalid_depth(self):
        with pytest.raises(ValueError):
            SparseMerkleTree(0)
        with pytest.raises(ValueError):
            SparseMerkleTree(BoothConstants.MAX_TREE_DEPTH + 1)

    def test_index_out_of_range(self):
        with pytest.raises(IndexOutOfRange):
            SparseMerkleTree(9, {512: TWO})
        with pytest.raises(IndexOutOfRange):
            SparseMerkleTree(9, {-1: TWO})

    def test_non_integer_index_rejected(self):
        """Floats are not truncated and bools are not indices."""
        for bad in (5.7, 5.0, True, False, None, "5.7", "0x5"):
            with pytest.raises(IndexOutOfRange):
                check_index(bad, 9)
        with pytest.raises(IndexOutOfRange):
            SparseMerkleTree(9, {5.7: TWO})
        with pytest.raises(IndexOutOfRange):
            SparseMerkleTree(9, {5: TWO}).create_proof(True)

    def test_decimal_string_index_accepted(self):
        assert check_index("5", 9) == 5
        assert check_index(511, 9) == 511

    def test_short_leaf_rejected(self):
        with pytest.raises(LeafEncodingError):
            SparseMerkleTree(9, {0: b"\x01" * 31})


class TestProofs:
    """Tests for proof creation and verification."""

    def test_proof_reproduces_root_for_every_leaf(self):
        tree = SparseMerkleTree(4, {0: leaf(1), 5: leaf(2), 15: leaf(3)})
        for index in range(16):
            proof = tree.create_proof(index)
            assert len(proof) == 4
            assert (
                compute_root_from_proof(
                    index, tree.get_leaf(index), proof, 4
                )
                == tree.root
            )

    def test_empty_tree_proof_is_all_zero(self):
        tree = SparseMerkleTree(9)
        assert tree.create_proof(3) == [ZERO] * 9

    def test_proof_accepts_hex_siblings(self):
        tree = SparseMerkleTree(9, {5: TWO, 7: TWO})
        proof = ["0x" + p.hex() for p in tree.create_proof(5)]
        assert compute_root_from_proof(5, TWO, proof, 9) == tree.root

    def test_short_proof_rejected(self):
        tree = SparseMerkleTree(9)
        with pytest.raises(ProofLengthMismatch):
            compute_root_from_proof(0, ZERO, tree.create_proof(0)[:-1], 9)

    def test_malformed_sibling_rejected(self):
        proof = SparseMerkleTree(9).create_proof(0)
        proof[3] = b"\x00" * 31
        with pytest.raises(ProofLengthMismatch):
            compute_root_from_proof(0, ZERO, proof, 9)

    def test_proof_index_out_of_range(self):
        tree = SparseMerkleTree(9)
        with pytest.raises(IndexOutOfRange):
            tree.create_proof(2**9)


class TestUpdate:
    """Tests for incremental updates and proof-based transitions."""

    def test_update_matches_rebuild(self):
        tree = SparseMerkleTree(9, {7: TWO})
        new_root = tree.update(5, THREE)
        assert new_root == SparseMerkleTree(9, {5: THREE, 7: TWO}).root
        assert tree.root == new_root

    def test_update_to_zero_restores_empty_root(self):
        tree = SparseMerkleTree(9, {5: TWO})
        assert tree.update(5, ZERO) == ZERO
        assert tree.leaves == {}

    def test_noop_update_keeps_root(self):
        tree = SparseMerkleTree(9, {5: TWO, 7: TWO})
        before = tree.root
        assert tree.update(5, TWO) == before

    def test_update_leaves_other_proofs_valid(self):
        """A leaf's value only affects the root through its own path."""
        tree = SparseMerkleTree(9, {5: TWO, 7: TWO})
        tree.update(5, THREE)
        proof = tree.create_proof(7)
        assert compute_root_from_proof(7, TWO, proof, 9) == tree.root

    def test_verify_and_compute_matches_update(self):
        tree = SparseMerkleTree(9, {5: TWO, 7: TWO})
        old_root = tree.root
        proof = tree.create_proof(5)
        new_root = tree.verify_and_compute_new_root(
            5, proof, TWO, THREE, old_root
        )
        assert tree.root == old_root
        assert new_root == tree.update(5, THREE)

    def test_verify_rejects_wrong_old_leaf(self):
        tree = SparseMerkleTree(9, {5: TWO})
        with pytest.raises(ProofMismatch) as exc_info:
            verify_and_compute_new_root(
                5, tree.create_proof(5), THREE, TWO, tree.root, 9
            )
        assert exc_info.value.expected_root == tree.root
        assert exc_info.value.computed_root != tree.root
        assert isinstance(exc_info.value, MerkleProofException)

    def test_verify_rejects_wrong_index(self):
        tree = SparseMerkleTree(9, {5: TWO})
        with pytest.raises(ProofMismatch):
            verify_and_compute_new_root(
                4, tree.create_proof(5), TWO, THREE, tree.root, 9
            )

    def test_repr(self):
        tree = SparseMerkleTree(9, {5: TWO})
        assert "depth=9" in repr(tree)
        assert "leaves=1" in repr(tree)
