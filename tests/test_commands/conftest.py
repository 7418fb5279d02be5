from __future__ import annotations

import os
from typing import Generator

import pytest
from click.testing import CliRunner

from kiwiko.utils.console import reconfigure_console
from kiwiko.utils.logger import disable_logging


@pytest.fixture(autouse=True)
def restore_global_state() -> Generator[None, None, None]:
    """Undo the environment, console and logging changes the CLI makes."""
    saved = os.environ.get("NO_COLOR")
    yield
    if saved is None:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = saved
    reconfigure_console()
    disable_logging()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()
