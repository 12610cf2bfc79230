from __future__ import annotations

from datetime import datetime

import pytest

from tests.fakes import World, build_world


@pytest.fixture
def world() -> World:
    return build_world(now=datetime(2025, 1, 1, 8, 0))
