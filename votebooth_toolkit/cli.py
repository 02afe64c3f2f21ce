#!/usr/bin/env python3
"""
Unified CLI for the Voting Booth toolkit.

Examples:
  - Trees
    votebooth tree-root --leaves leaves.json [--depth 9]
    votebooth tree-proof --leaves leaves.json --index 5 [--compressed]

  - Ballots
    votebooth ballot-quote --previous 2 --new 3

  - Chain
    votebooth card-root --cards-address 0x... --card-id 123 [--rpc-url https://...]

  - Consolidation
    votebooth recover-signer --contract 0x... --v 27 --r 0x... --s 0x...

Leaves files map leaf index to 32-byte hex value:
    {"5": "0x0000000000000000000000000000000000000000000000001bc16d674ec80000"}
"""

import argparse
import os
from typing import List, Optional

from votebooth_toolkit.ballot.codec import decode_leaf, to_fixed_point
from votebooth_toolkit.ballot.consolidation import (
    consolidation_message,
    recover_signer,
)
from votebooth_toolkit.ballot.engine import BallotEngine
from votebooth_toolkit.commands.helpers import handle_command_error
from votebooth_toolkit.commands.validation import (
    validate_card_id,
    validate_depth,
    validate_eth_address,
)
from votebooth_toolkit.contracts.reader import BoothContractReader
from votebooth_toolkit.shared.constants import BoothConstants, EnvVars
from votebooth_toolkit.shared.logging import set_log_level
from votebooth_toolkit.smt.proof import compress_proof, proof_to_hex
from votebooth_toolkit.smt.tree import EMPTY_NODE, SparseMerkleTree
from votebooth_toolkit.utils.formatters import (
    console,
    create_quote_table,
    format_address,
    load_json,
    save_json_output,
)


def _load_tree(args: argparse.Namespace) -> SparseMerkleTree:
    depth = validate_depth(args.depth)
    leaves = load_json(args.leaves) if args.leaves else {}
    return SparseMerkleTree(depth, leaves)


def cmd_tree_root(args: argparse.Namespace) -> None:
    tree = _load_tree(args)
    console.print(
        f"[cyan]Root[/cyan] (depth {tree.depth}, "
        f"{len(tree.leaves)} non-default leaves): {tree.root_hex}"
    )
    if args.output:
        save_json_output(
            {
                "depth": tree.depth,
                "root": tree.root_hex,
                "leaves": {
                    str(i): "0x" + leaf.hex()
                    for i, leaf in sorted(tree.leaves.items())
                },
            },
            args.output,
        )


def cmd_tree_proof(args: argparse.Namespace) -> None:
    tree = _load_tree(args)
    proof = tree.create_proof(args.index)
    leaf = tree.get_leaf(args.index)

    output_data = {
        "depth": tree.depth,
        "index": args.index,
        "leaf": "0x" + leaf.hex(),
        "leaf_amount": str(decode_leaf(leaf)),
        "root": tree.root_hex,
        "proof": proof_to_hex(proof),
    }
    if args.compressed:
        output_data["compressed_proof"] = (
            "0x" + compress_proof(proof, tree.depth).hex()
        )

    console.print(
        f"[cyan]Proof[/cyan] for leaf {args.index} against {tree.root_hex}"
    )
    save_json_output(output_data, args.output or f"proof_{args.index}.json")


def cmd_ballot_quote(args: argparse.Namespace) -> None:
    transition = BallotEngine.price(
        to_fixed_point(args.previous), to_fixed_point(args.new)
    )
    console.print(create_quote_table(transition))
    if transition.is_sign_flip:
        console.print(
            "[yellow]Direction flip:[/yellow] previous tally is withdrawn "
            "from its pool in the same ballot"
        )
    if args.json:
        console.print_json(data=transition.to_quote_dict())


def cmd_card_root(args: argparse.Namespace) -> None:
    cards_address = validate_eth_address(args.cards_address, "cards_address")
    card_id = validate_card_id(args.card_id)
    rpc_url = args.rpc_url or os.getenv(EnvVars.RPC_URL)
    if not rpc_url:
        raise ValueError(f"Pass --rpc-url or set {EnvVars.RPC_URL}")

    reader = BoothContractReader.from_rpc_url(rpc_url)
    payload = reader.read_card_root(cards_address, card_id)

    note = " (empty tree)" if payload == EMPTY_NODE else ""
    console.print(f"Card {card_id} root: 0x{payload.hex()}{note}")


def cmd_recover_signer(args: argparse.Namespace) -> None:
    contract = validate_eth_address(args.contract, "contract")
    message = consolidation_message(contract)
    signer = recover_signer(message, args.v, args.r, args.s)
    console.print(f"Message: 0x{message.hex()}")
    console.print(f"Signer:  {signer}")

    if args.authorized:
        authorized = validate_eth_address(args.authorized, "authorized")
        if signer == authorized:
            console.print("[green]✓ Signer is authorized[/green]")
        else:
            console.print(
                f"[red]✗ Signer is not the authorized address "
                f"({format_address(authorized)})[/red]"
            )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="votebooth",
        description="Unified CLI for the Voting Booth toolkit",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level for this run (overrides VB_LOG_LEVEL)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # tree-root
    p_root = sub.add_parser("tree-root", help="Compute a sparse tree root")
    p_root.add_argument("--leaves", type=str, help="Leaves JSON file")
    p_root.add_argument(
        "--depth", type=int, default=BoothConstants.DEFAULT_TREE_DEPTH
    )
    p_root.add_argument("--output", type=str, help="Output filename")
    p_root.set_defaults(func=cmd_tree_root)

    # tree-proof
    p_proof = sub.add_parser("tree-proof", help="Generate a leaf proof")
    p_proof.add_argument("--leaves", type=str, help="Leaves JSON file")
    p_proof.add_argument("--index", type=int, required=True)
    p_proof.add_argument(
        "--depth", type=int, default=BoothConstants.DEFAULT_TREE_DEPTH
    )
    p_proof.add_argument(
        "--compressed",
        action="store_true",
        help="Also emit the compact bitmap proof",
    )
    p_proof.add_argument("--output", type=str, help="Output filename")
    p_proof.set_defaults(func=cmd_tree_proof)

    # ballot-quote
    p_quote = sub.add_parser(
        "ballot-quote", help="Preview cost and tally routing of a ballot"
    )
    p_quote.add_argument(
        "--previous", type=str, default="0", help="Current vote (decimal)"
    )
    p_quote.add_argument(
        "--new", type=str, required=True, help="Desired vote (decimal)"
    )
    p_quote.add_argument("--json", action="store_true", help="Output JSON")
    p_quote.set_defaults(func=cmd_ballot_quote)

    # card-root
    p_card = sub.add_parser("card-root", help="Read a card root from chain")
    p_card.add_argument("--cards-address", type=str, required=True)
    p_card.add_argument("--card-id", type=int, required=True)
    p_card.add_argument("--rpc-url", type=str)
    p_card.set_defaults(func=cmd_card_root)

    # recover-signer
    p_sig = sub.add_parser(
        "recover-signer", help="Recover the signer of a consolidation"
    )
    p_sig.add_argument("--contract", type=str, required=True)
    p_sig.add_argument("--v", type=int, required=True)
    p_sig.add_argument("--r", type=str, required=True)
    p_sig.add_argument("--s", type=str, required=True)
    p_sig.add_argument("--authorized", type=str, help="Expected signer")
    p_sig.set_defaults(func=cmd_recover_signer)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)
    try:
        args.func(args)
    except Exception as e:
        handle_command_error(e)


if __name__ == "__main__":
    main()
