import os
import stat

import pytest

from core.config import EngineConfig


ECHO_ENGINE = """#!/bin/sh
read prompt
printf '<think>pondering</think>'
printf 'you said: %s (%s)\\n' "$prompt" "$2"
"""


@pytest.fixture
def fake_engine(tmp_path):
    """Write a /bin/sh stand-in for ``ollama`` and return its EngineConfig."""

    def make(body: str = ECHO_ENGINE) -> EngineConfig:
        path = tmp_path / "ollama"
        path.write_text(body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return EngineConfig(engine_path=str(path), home=str(tmp_path))

    return make


@pytest.fixture
def missing_engine(tmp_path):
    return EngineConfig(engine_path=os.path.join(str(tmp_path), "no-such-ollama"), home=str(tmp_path))
