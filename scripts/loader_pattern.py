"""
loader_pattern.py

Locates the "load wasm from disk" statements in a generated JS loader and
splices in an inline base64 buffer instead.

The recognised shape is deliberately narrow:

    const wasmPath = <expr>;
    ...
    const bytes = require('fs').readFileSync(wasmPath);

Everything from the declaration keyword through the terminator of the first
following ``readFileSync(wasmPath);`` is replaced by a single statement.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from typing import Union

DEFAULT_PATH_VAR = "wasmPath"
DEFAULT_BINDING = "wasmBytes"


@dataclass(frozen=True)
class LoaderMatch:
    """Half-open span ``[start, end)`` covering declaration through read call."""

    start: int
    end: int
    path_var: str
    declaration: str
    read_call: str


@dataclass(frozen=True)
class Rewritten:
    text: str
    match: LoaderMatch


@dataclass(frozen=True)
class NoMatchFound:
    text: str


RewriteResult = Union[Rewritten, NoMatchFound]


def _declaration_re(path_var: str) -> re.Pattern[str]:
    # `<expr>` ends at the first terminator, like the generated loaders emit it
    return re.compile(
        rf"(?<![\w$])(?:const|let|var)\s+{re.escape(path_var)}\s*=\s*[^;]+;"
    )


def _read_call_re(path_var: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?<![\w$])readFileSync\s*\(\s*{re.escape(path_var)}\s*\)\s*;"
    )


def find_wasm_load(source: str, path_var: str = DEFAULT_PATH_VAR) -> LoaderMatch | None:
    """Return the first declaration/read span for ``path_var`` or ``None``.

    Only the first declaration is considered: any read following a later
    declaration also follows the first one.
    """
    declaration = _declaration_re(path_var).search(source)
    if declaration is None:
        return None

    read_call = _read_call_re(path_var).search(source, declaration.end())
    if read_call is None:
        return None

    return LoaderMatch(
        start=declaration.start(),
        end=read_call.end(),
        path_var=path_var,
        declaration=declaration.group(0),
        read_call=read_call.group(0),
    )


def encode_artifact(data: bytes) -> str:
    """Standard base64 with padding, ASCII only."""
    return base64.b64encode(data).decode("ascii")


def embed_statement(encoded: str, binding: str = DEFAULT_BINDING) -> str:
    return f"const {binding} = Buffer.from('{encoded}', 'base64');"


def find_embedded(source: str, binding: str = DEFAULT_BINDING) -> str | None:
    """Return the base64 text of an inline buffer written by ``embed_statement``."""
    found = re.search(
        rf"(?<![\w$])const\s+{re.escape(binding)}\s*=\s*"
        r"Buffer\.from\('([A-Za-z0-9+/=]*)',\s*'base64'\)\s*;",
        source,
    )
    return found.group(1) if found else None


def rewrite_loader(
    source: str,
    encoded: str,
    path_var: str = DEFAULT_PATH_VAR,
    binding: str = DEFAULT_BINDING,
) -> RewriteResult:
    """Replace the first load span with an inline buffer statement.

    Text outside the matched span is kept verbatim. When nothing matches the
    caller gets the unchanged source back wrapped in ``NoMatchFound`` and
    decides what that means.
    """
    match = find_wasm_load(source, path_var)
    if match is None:
        return NoMatchFound(text=source)

    text = source[: match.start] + embed_statement(encoded, binding) + source[match.end :]
    return Rewritten(text=text, match=match)
