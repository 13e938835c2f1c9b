#!/usr/bin/env python3
"""Build a binary search index from a demo document collection.

The index builder itself is an external compiled module; this script only
feeds it the documents JSON and stores whatever bytes it returns.

Usage:
    python scripts/build_index.py          # demo/build_index/documents.json
    python scripts/build_index.py size     # demo/build_index/size.json
"""

from __future__ import annotations

import argparse
import importlib
import json
import os
import sys
import traceback
from pathlib import Path
from typing import Callable

try:
    from scripts.documents_lib import validate_documents
except ImportError:
    # Direct invocation without an installed package
    sys.path.append(str(Path(__file__).resolve().parent.parent))
    from scripts.documents_lib import validate_documents

DEMO_DIR = Path("demo/build_index")
DEFAULT_DOCUMENTS = DEMO_DIR / "documents.json"
SIZE_DOCUMENTS = DEMO_DIR / "size.json"
OUTPUT = DEMO_DIR / "index.bin"

PROFILES = {"size": SIZE_DOCUMENTS}

BUILDER_ENV_VAR = "DOCFIND_BUILDER"
DEFAULT_BUILDER = "docfind_build_index:build"

LOG_PREFIX = "[build-index]"

BuildFn = Callable[[str], bytes]


def documents_for_profile(profile: str | None) -> Path:
    """Unknown or missing profiles fall back to the default collection."""
    return PROFILES.get(profile or "", DEFAULT_DOCUMENTS)


def load_builder(spec: str) -> BuildFn:
    """Resolve ``module:attr`` to the external ``build`` callable."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Builder must look like 'module:function', got {spec!r}")

    module = importlib.import_module(module_name)
    try:
        build = getattr(module, attr)
    except AttributeError as exc:
        raise ValueError(f"Module {module_name!r} has no attribute {attr!r}") from exc
    if not callable(build):
        raise ValueError(f"{spec!r} is not callable")
    return build


def build_index(documents_path: Path, output_path: Path, build: BuildFn) -> int:
    """Run ``build`` over the documents text and write its result verbatim.

    Errors from reading the input or from the builder are not caught here.
    Returns the number of bytes written. Anything but a bytes-like result
    raises ``TypeError`` before the output file is touched.
    """
    documents_json = documents_path.read_text(encoding="utf-8")
    result = build(documents_json)
    if not isinstance(result, (bytes, bytearray, memoryview)):
        raise TypeError(
            f"Index builder returned {type(result).__name__}, expected bytes"
        )
    index = bytes(result)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(index)
    return len(index)


def _validate(documents_path: Path) -> None:
    try:
        payload = json.loads(documents_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Cannot parse {documents_path} as JSON: {exc}") from exc
    validate_documents(payload, label=str(documents_path))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the demo search index with the external index builder."
    )
    parser.add_argument(
        "profile",
        nargs="?",
        default=None,
        help="'size' selects the size benchmark collection; anything else the default one",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=OUTPUT,
        help=f"Target file for the binary index (default: {OUTPUT})",
    )
    parser.add_argument(
        "--builder",
        default=os.environ.get(BUILDER_ENV_VAR, DEFAULT_BUILDER),
        help=f"External build function as module:function (env {BUILDER_ENV_VAR}, default: {DEFAULT_BUILDER})",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check the documents against contracts/documents.schema.json first",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    documents_path = documents_for_profile(args.profile)

    try:
        if args.validate:
            _validate(documents_path)
        build = load_builder(args.builder)
        size = build_index(documents_path, args.output, build)
    except (OSError, ValueError, ImportError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        # Builder failures (e.g. malformed JSON) are reported as-is
        print(f"{LOG_PREFIX} Index build failed: {exc}", file=sys.stderr)
        traceback.print_exc()
        return 1

    print(f"{LOG_PREFIX} {documents_path} → wrote {args.output} ({size} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
