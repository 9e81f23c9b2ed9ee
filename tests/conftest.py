from __future__ import annotations

import pytest

from logconfig import configure_logging


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    configure_logging(level="WARNING")
