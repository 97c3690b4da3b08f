from __future__ import annotations

import pytest

from tests.mocks.vendors import StubVendor

CREDENTIAL_VARS = ("OPENAI_API_KEY", "REPLICATE_API_TOKEN", "FAL_KEY")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in ("JEWELGEN_DEFAULT_PROVIDER", "JEWELGEN_SKETCH_MODE", "JEWELGEN_PROVIDER_KEYS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def vendor(monkeypatch) -> StubVendor:
    return StubVendor().install(monkeypatch)
