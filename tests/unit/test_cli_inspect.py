"""Unit tests for the tokenlens-inspect command line entry point."""

import json
import logging

import pytest

from tokenlens.cli.inspect import build_argument_parser, main


def test_metadata_command(tmp_path, capsys):
    """The metadata subcommand prints the unified record as JSON."""
    source = tmp_path / "description.txt"
    source.write_text('{"721":{"93":{"Cybercitizen":"93"}}}', encoding="utf-8")

    assert main(["metadata", str(source)]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["kind"] == "structured-index"
    assert output["collection_name"] == "Cybercitizen"
    assert output["trait_map"] == {"Token ID": "93"}


def test_metadata_command_empty_input(tmp_path, capsys):
    """Whitespace-only input prints null."""
    source = tmp_path / "empty.txt"
    source.write_text("   \n", encoding="utf-8")

    assert main(["metadata", str(source)]) == 0
    assert json.loads(capsys.readouterr().out) is None


def test_classify_command_with_filters(tmp_path, capsys):
    """Balance records are classified, filtered and grouped."""
    source = tmp_path / "balances.json"
    source.write_text(
        json.dumps(
            [
                {"id": "a1", "quantity": "1", "name": "Dragon #1", "attributes": [{"trait_type": "Rarity", "value": "Epic"}]},
                {"id": "b2", "quantity": "1", "name": "Dragon #2", "attributes": [{"trait_type": "Rarity", "value": "Common"}]},
                {"id": "c3", "quantity": "10", "name": "Gold"},
            ]
        ),
        encoding="utf-8",
    )

    assert main(["classify", str(source), "--group", "--trait", "Rarity=Epic"]) == 0
    output = json.loads(capsys.readouterr().out)
    assert list(output) == ["Dragon"]
    assert [token["id"] for token in output["Dragon"]] == ["a1"]
    assert output["Dragon"][0]["category"] == "nft"


def test_classify_command_utxos(tmp_path, capsys):
    """UTXO input is aggregated before classification."""
    source = tmp_path / "boxes.json"
    source.write_text(
        json.dumps([{"assets": [{"tokenId": "t1", "amount": "3"}]}, {"assets": [{"tokenId": "t1", "amount": "4"}]}]),
        encoding="utf-8",
    )

    assert main(["--indent", "0", "classify", str(source), "--utxos"]) == 0
    output = json.loads(capsys.readouterr().out)
    assert [(token["id"], token["quantity"]) for token in output] == [("t1", 7)]


def test_classify_rejects_non_array(tmp_path):
    """A JSON document that is not an array is an input error."""
    source = tmp_path / "balances.json"
    source.write_text('{"id": "a1"}', encoding="utf-8")
    assert main(["classify", str(source)]) == 1


def test_missing_file_is_an_error(tmp_path):
    """Unreadable input files return a non-zero exit code."""
    assert main(["metadata", str(tmp_path / "missing.txt")]) == 1


def test_trait_argument_requires_pair():
    """--trait values must look like NAME=VALUE."""
    with pytest.raises(SystemExit):
        build_argument_parser().parse_args(["classify", "x.json", "--trait", "Rarity"])


def test_settings_sources_are_logged(tmp_path, caplog):
    """The command logs where its settings came from."""
    source = tmp_path / "description.txt"
    source.write_text("plain text", encoding="utf-8")

    with caplog.at_level(logging.DEBUG, logger="tokenlens.cli.inspect"):
        assert main(["metadata", str(source)]) == 0

    assert any(record.getMessage().startswith("Settings loaded from ") for record in caplog.records)
