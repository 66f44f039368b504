from __future__ import annotations

import pytest

from eidos import logging_utils


@pytest.fixture(autouse=True)
def _reset_logging_state(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(logging_utils, "_CONFIGURED_LEVEL", None)
