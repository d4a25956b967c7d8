"""Inspect metadata blobs and classify wallet balance exports from the shell.

Examples::

    tokenlens-inspect metadata description.txt
    echo '{"721": {...}}' | tokenlens-inspect metadata -
    tokenlens-inspect classify balances.json --group --trait Rarity=Epic
    tokenlens-inspect classify boxes.json --utxos --collection "Rosen Bridge Wrapped Tokens"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence

from tokenlens.classification import ClassifierOptions, classify_tokens
from tokenlens.ingestion.balances import aggregate_utxo_assets
from tokenlens.metadata import MetadataOptions, parse_metadata
from tokenlens.observability import configure_logging
from tokenlens.query import TokenFilter, composite_filter, group_by_collection
from tokenlens.settings import get_settings

LOGGER = logging.getLogger("tokenlens.cli.inspect")


def _trait_pair(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {raw!r}")
    return name.strip(), value.strip()


def build_argument_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="tokenlens-inspect", description=__doc__.splitlines()[0])
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation level (default: 2).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    metadata = subparsers.add_parser("metadata", help="Parse one metadata blob and print the unified record.")
    metadata.add_argument("source", nargs="?", default="-", help="File to read, or '-' for stdin (default).")
    metadata.add_argument("--full-payload", action="store_true", help="Keep the full payload for generic JSON.")
    metadata.add_argument("--nested-traits", action="store_true", help="Also read traits from 'properties'.")

    classify = subparsers.add_parser("classify", help="Classify a JSON array of balance records.")
    classify.add_argument("source", help="JSON file with balance records, or '-' for stdin.")
    classify.add_argument("--utxos", action="store_true", help="Input is a list of UTXOs/boxes with assets.")
    classify.add_argument("--group", action="store_true", help="Group output by collection.")
    classify.add_argument("--collection", action="append", default=[], help="Keep only this collection.")
    classify.add_argument("--author", action="append", default=[], help="Keep only this creator.")
    classify.add_argument("--contract", action="append", default=[], help="Keep only this contract.")
    classify.add_argument("--name", help="Keep tokens whose name contains this text.")
    classify.add_argument(
        "--trait",
        action="append",
        default=[],
        type=_trait_pair,
        help="Keep tokens with trait NAME=VALUE (repeatable).",
    )
    return parser


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _run_metadata(args: argparse.Namespace) -> Any:
    settings = get_settings()
    options = MetadataOptions.from_settings(settings).model_copy(
        update={
            "include_full_payload": args.full_payload or settings.metadata.include_full_payload,
            "extract_nested_traits": args.nested_traits or settings.metadata.extract_nested_traits,
        }
    )
    parsed = parse_metadata(_read_source(args.source), options)
    return parsed.model_dump(mode="json") if parsed is not None else None


def _run_classify(args: argparse.Namespace) -> Any:
    payload = json.loads(_read_source(args.source))
    if not isinstance(payload, list):
        raise ValueError("Expected a JSON array of records")
    records: Sequence[Any] = aggregate_utxo_assets(payload) if args.utxos else payload

    tokens = classify_tokens(records, ClassifierOptions.from_settings(get_settings()))
    criteria = TokenFilter(
        collections=args.collection,
        authors=args.author,
        contracts=args.contract,
        name=args.name,
        traits=dict(args.trait),
    )
    selected = composite_filter(tokens, criteria)
    LOGGER.info("Classified %s record(s); %s selected", len(tokens), len(selected))

    if args.group:
        grouped: Dict[str, List[Any]] = {}
        for collection, members in group_by_collection(selected).items():
            grouped[collection] = [token.model_dump(mode="json") for token in members]
        return grouped
    return [token.model_dump(mode="json") for token in selected]


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``tokenlens-inspect``."""

    args = build_argument_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    LOGGER.debug(
        "Settings loaded from %s",
        ", ".join(str(path) for path in (*settings.config_files, *settings.env_files)) or "defaults",
    )

    try:
        if args.command == "metadata":
            result = _run_metadata(args)
        else:
            result = _run_classify(args)
    except (OSError, ValueError) as exc:
        LOGGER.error("Failed to read input: %s", exc)
        return 1

    json.dump(result, sys.stdout, indent=args.indent, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
