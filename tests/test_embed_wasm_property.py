import base64
import re

import pytest

hypothesis = pytest.importorskip("hypothesis")
from hypothesis import given, settings, strategies as st  # type: ignore

from scripts.loader_pattern import NoMatchFound, Rewritten, encode_artifact, rewrite_loader

LOAD = "const wasmPath = 'bg.wasm';\nconst wasmBytes = require('fs').readFileSync(wasmPath);"
EMBEDDED_RE = re.compile(r"Buffer\.from\('([A-Za-z0-9+/=]*)', 'base64'\)")

# Surrounding code never contains a competing declaration or read call.
_filler = st.text(max_size=64).filter(
    lambda s: not any(tok in s for tok in ("wasmPath", "readFileSync", "Buffer.from"))
)


@settings(max_examples=100, deadline=None)
@given(payload=st.binary(max_size=4096), prefix=_filler, suffix=_filler)
def test_embedded_constant_decodes_to_payload(payload: bytes, prefix: str, suffix: str):
    """Das eingebettete Base64 ergibt exakt die Eingabebytes."""

    source = prefix + "\n" + LOAD + "\n" + suffix
    result = rewrite_loader(source, encode_artifact(payload))

    assert isinstance(result, Rewritten)
    assert result.text.startswith(prefix + "\n")
    assert result.text.endswith("\n" + suffix)
    (encoded,) = EMBEDDED_RE.findall(result.text)
    assert base64.b64decode(encoded, validate=True) == payload


@settings(max_examples=100, deadline=None)
@given(payload=st.binary(max_size=256), prefix=_filler)
def test_second_rewrite_never_changes_text(payload: bytes, prefix: str):
    first = rewrite_loader(prefix + "\n" + LOAD, encode_artifact(payload))
    assert isinstance(first, Rewritten)

    second = rewrite_loader(first.text, encode_artifact(b"other"))
    assert isinstance(second, NoMatchFound)
    assert second.text == first.text


@settings(max_examples=100, deadline=None)
@given(source=_filler)
def test_source_without_pattern_is_returned_verbatim(source: str):
    result = rewrite_loader(source, "AAH/")
    assert isinstance(result, NoMatchFound)
    assert result.text == source
