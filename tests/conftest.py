import os
import sys
import textwrap

import pytest

try:
    from hypothesis import settings
    from hypothesis.errors import InvalidArgument
except Exception:  # pragma: no cover - hypothesis optional in some environments
    settings = None
else:
    try:
        settings.register_profile(
            "ci",
            settings(max_examples=100, deadline=None, derandomize=True),
        )
    except InvalidArgument:
        # Profile already registered (e.g. repeated test session)
        pass
    settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


FAKE_BUILDER_SOURCE = textwrap.dedent(
    '''
    import hashlib
    import json

    calls = []


    def build(documents_json):
        calls.append(documents_json)
        digest = hashlib.sha256(documents_json.encode("utf-8")).digest()
        return bytearray(b"IDX\\x00" + digest + b"\\xff")


    def strict(documents_json):
        json.loads(documents_json)
        return build(documents_json)


    def fail(documents_json):
        raise RuntimeError("Failed to parse JSON: expected value at line 1 column 1")


    def wrong_type(documents_json):
        return len(documents_json)


    not_callable = 42
    '''
)


@pytest.fixture
def fake_builder(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Importable stand-in for the compiled index builder, as ``fake_docfind``."""
    module_dir = tmp_path / "fake_pkg"
    module_dir.mkdir()
    (module_dir / "fake_docfind.py").write_text(FAKE_BUILDER_SOURCE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(module_dir))
    monkeypatch.delitem(sys.modules, "fake_docfind", raising=False)

    import fake_docfind  # type: ignore

    return fake_docfind
