#!/usr/bin/env python3
"""Inline a compiled .wasm file into its JS loader as a base64 buffer.

Usage:
    python scripts/embed_wasm.py <wasmFile> <jsFile>

The loader stops reading the binary from disk at runtime; the .wasm file is
removed afterwards.
"""

from __future__ import annotations

import argparse
import os
import stat
import sys
import tempfile
import traceback
from pathlib import Path

try:
    from scripts.loader_pattern import (
        DEFAULT_BINDING,
        DEFAULT_PATH_VAR,
        NoMatchFound,
        RewriteResult,
        encode_artifact,
        find_embedded,
        find_wasm_load,
        rewrite_loader,
    )
except ImportError:
    # Direct invocation without an installed package
    sys.path.append(str(Path(__file__).resolve().parent.parent))
    from scripts.loader_pattern import (
        DEFAULT_BINDING,
        DEFAULT_PATH_VAR,
        NoMatchFound,
        RewriteResult,
        encode_artifact,
        find_embedded,
        find_wasm_load,
        rewrite_loader,
    )

LOG_PREFIX = "[embed-wasm]"


def _read_text(path: Path) -> str:
    # newline="" keeps CRLF loaders byte-identical outside the spliced span
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def atomic_write_text(path: Path, text: str) -> None:
    """Write via a sibling temp file and ``os.replace`` it over ``path``."""
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        newline="",
        prefix=f"{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
        delete=False,
    )
    tmp_path = Path(handle.name)
    try:
        with handle:
            handle.write(text)
        if path.exists():
            os.chmod(tmp_path, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def is_already_embedded(
    wasm_path: Path,
    js_path: Path,
    path_var: str = DEFAULT_PATH_VAR,
    binding: str = DEFAULT_BINDING,
) -> bool:
    """True for a re-run: the binary is gone, the loader no longer reads it and
    already carries an inline buffer.

    A missing binary next to a loader without that buffer is left to fail as
    an I/O error.
    """
    if wasm_path.exists():
        return False
    source = _read_text(js_path)
    return find_wasm_load(source, path_var) is None and find_embedded(source, binding) is not None


def embed_wasm(
    wasm_path: Path,
    js_path: Path,
    *,
    path_var: str = DEFAULT_PATH_VAR,
    binding: str = DEFAULT_BINDING,
    keep_wasm: bool = False,
) -> RewriteResult:
    """Embed ``wasm_path`` into ``js_path`` and delete the binary.

    On ``NoMatchFound`` neither file is touched.
    """
    encoded = encode_artifact(wasm_path.read_bytes())
    source = _read_text(js_path)

    result = rewrite_loader(source, encoded, path_var, binding)
    if isinstance(result, NoMatchFound):
        return result

    atomic_write_text(js_path, result.text)
    if not keep_wasm:
        wasm_path.unlink(missing_ok=True)
    return result


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Embed a .wasm binary into its JS loader as base64."
    )
    parser.add_argument("wasm_file", type=Path, help="Path to the compiled .wasm file")
    parser.add_argument(
        "js_file", type=Path, help="Path to the JS loader that reads the .wasm file"
    )
    parser.add_argument(
        "--path-var",
        default=DEFAULT_PATH_VAR,
        help=f"Name of the path variable in the loader (default: {DEFAULT_PATH_VAR})",
    )
    parser.add_argument(
        "--binding",
        default=DEFAULT_BINDING,
        help=f"Name of the inline buffer constant (default: {DEFAULT_BINDING})",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of warning when the loader has no load pattern",
    )
    parser.add_argument(
        "--keep-wasm",
        action="store_true",
        help="Leave the .wasm file in place after embedding",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        if is_already_embedded(
            args.wasm_file, args.js_file, args.path_var, args.binding
        ):
            print(
                f"{LOG_PREFIX} {args.js_file} already embedded and {args.wasm_file} absent; nothing to do.",
                file=sys.stderr,
            )
            return 0

        result = embed_wasm(
            args.wasm_file,
            args.js_file,
            path_var=args.path_var,
            binding=args.binding,
            keep_wasm=args.keep_wasm,
        )
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        print(f"Unexpected error: {exc}", file=sys.stderr)
        traceback.print_exc()
        return 1

    if isinstance(result, NoMatchFound):
        print(
            f"{LOG_PREFIX} Warning: no `{args.path_var}` load pattern in {args.js_file}; "
            f"loader left unchanged, {args.wasm_file} kept.",
            file=sys.stderr,
        )
        return 1 if args.strict else 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
