from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer GENBRIDGE_* variables out of configuration tests."""

    for name in ("GENBRIDGE_ENDPOINT", "GENBRIDGE_MODEL", "GENBRIDGE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
