from __future__ import annotations

import pytest

from mcp_joplin_notes.joplin_client import JoplinClientConfig


@pytest.fixture
def config() -> JoplinClientConfig:
    return JoplinClientConfig(token="secret-token")
