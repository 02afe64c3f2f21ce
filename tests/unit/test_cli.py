"""
Unit tests for the votebooth CLI.
"""

import json
from unittest.mock import MagicMock

import pytest

from votebooth_toolkit.ballot.consolidation import consolidation_message
from votebooth_toolkit.cli import build_parser, main
from votebooth_toolkit.shared.constants import EnvVars
from votebooth_toolkit.smt.proof import decompress_proof, proof_from_hex
from votebooth_toolkit.smt.tree import SparseMerkleTree

TWO = "0x0000000000000000000000000000000000000000000000001bc16d674ec80000"


@pytest.fixture
def leaves_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "leaves.json"
    path.write_text(json.dumps({"5": TWO, "7": TWO}))
    return str(path)


class TestParser:
    def test_commands_registered(self):
        parser = build_parser()
        args = parser.parse_args(["ballot-quote", "--new", "3"])
        assert args.previous == "0"
        assert args.func.__name__ == "cmd_ballot_quote"

    def test_missing_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestTreeCommands:
    """Tests for tree-root / tree-proof."""

    def test_tree_root(self, leaves_file, tmp_path):
        main(["tree-root", "--leaves", leaves_file, "--output", "root.json"])

        data = json.loads((tmp_path / "output" / "root.json").read_text())
        expected = SparseMerkleTree(9, {5: TWO, 7: TWO})
        assert data["root"] == expected.root_hex
        assert data["depth"] == 9
        assert sorted(data["leaves"]) == ["5", "7"]

    def test_tree_root_without_leaves(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        main(["tree-root", "--depth", "4", "--output", "empty.json"])
        data = json.loads((tmp_path / "output" / "empty.json").read_text())
        assert data["root"] == "0x" + "00" * 32

    def test_tree_proof(self, leaves_file, tmp_path):
        main(
            [
                "tree-proof",
                "--leaves",
                leaves_file,
                "--index",
                "5",
                "--compressed",
            ]
        )

        data = json.loads((tmp_path / "output" / "proof_5.json").read_text())
        tree = SparseMerkleTree(9, {5: TWO, 7: TWO})
        assert data["root"] == tree.root_hex
        assert data["leaf_amount"] == str(2 * 10**18)
        assert proof_from_hex(data["proof"]) == tree.create_proof(5)
        compressed = decompress_proof(data["compressed_proof"], 9)
        assert compressed == tree.create_proof(5)

    def test_tree_proof_reports_saved_path_once(
        self, leaves_file, tmp_path, capsys
    ):
        main(
            [
                "tree-proof",
                "--leaves",
                leaves_file,
                "--index",
                "5",
                "--output",
                "nested/p.json",
            ]
        )

        out = capsys.readouterr().out
        assert out.lower().count("saved") == 1
        assert "p.json" in out
        assert (tmp_path / "output" / "nested" / "p.json").exists()

    def test_bad_depth_exits(self, leaves_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["tree-root", "--leaves", leaves_file, "--depth", "0"])
        assert exc_info.value.code == 1


class TestBallotQuote:
    def test_json_output(self, capsys):
        main(["ballot-quote", "--previous", "2", "--new", "3", "--json"])
        out = capsys.readouterr().out
        assert "5000000000000000000" in out

    def test_too_many_decimals_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["ballot-quote", "--new", "0.0000000000000000001"])
        assert exc_info.value.code == 1


class TestChainCommands:
    def test_card_root_requires_rpc(self, monkeypatch, addresses):
        monkeypatch.delenv(EnvVars.RPC_URL, raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main(
                [
                    "card-root",
                    "--cards-address",
                    addresses["cards"],
                    "--card-id",
                    "123",
                ]
            )
        assert exc_info.value.code == 1

    def test_card_root_prints_payload_verbatim(
        self, monkeypatch, addresses, capsys
    ):
        reader = MagicMock()
        reader.read_card_root.return_value = b"\x00" * 32
        monkeypatch.setattr(
            "votebooth_toolkit.cli.BoothContractReader.from_rpc_url",
            lambda url: reader,
        )

        main(
            [
                "card-root",
                "--cards-address",
                addresses["cards"],
                "--card-id",
                "123",
                "--rpc-url",
                "http://localhost:8545",
            ]
        )

        out = capsys.readouterr().out
        assert "00" * 32 in out
        assert "empty tree" in out
        reader.read_card_root.assert_called_once()

    def test_recover_signer(self, addresses, voter, voter_key, capsys):
        sig = voter_key.sign_msg_hash(consolidation_message(addresses["booth"]))
        main(
            [
                "recover-signer",
                "--contract",
                addresses["booth"],
                "--v",
                str(sig.v + 27),
                "--r",
                hex(sig.r),
                "--s",
                hex(sig.s),
            ]
        )
        assert voter in capsys.readouterr().out

    def test_recover_signer_bad_contract(self):
        with pytest.raises(SystemExit):
            main(
                [
                    "recover-signer",
                    "--contract",
                    "0x1234",
                    "--v",
                    "27",
                    "--r",
                    "0x01",
                    "--s",
                    "0x01",
                ]
            )
