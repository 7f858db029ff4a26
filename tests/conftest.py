from __future__ import annotations

import logging
from pathlib import Path

import pytest

from derivekit.config import DeriveKitConfig
from derivekit.orchestrator import Orchestrator
from tests._fixtures.rust_sources import SourceTree


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTree:
    """Provide a reusable crate directory rooted at the pytest tmp_path."""
    return SourceTree(tmp_path)


@pytest.fixture
def orchestrator(tmp_path: Path) -> Orchestrator:
    return Orchestrator(config=DeriveKitConfig(root=tmp_path))


@pytest.fixture
def derivekit_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture records emitted under the derivekit logger hierarchy."""
    caplog.set_level(logging.DEBUG, logger="derivekit")
    return caplog


@pytest.fixture(autouse=True)
def _reset_derivekit_logger():
    yield
    logger = logging.getLogger("derivekit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
