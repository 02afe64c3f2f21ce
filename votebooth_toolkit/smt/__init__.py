from votebooth_toolkit.smt.proof import (
    compress_proof,
    decompress_proof,
    proof_from_hex,
    proof_to_hex,
)
from votebooth_toolkit.smt.tree import (
    EMPTY_NODE,
    SparseMerkleTree,
    compute_root_from_proof,
    verify_and_compute_new_root,
)

__all__ = [
    "SparseMerkleTree",
    "compute_root_from_proof",
    "verify_and_compute_new_root",
    "EMPTY_NODE",
    "compress_proof",
    "decompress_proof",
    "proof_to_hex",
    "proof_from_hex",
]
