"""
Tests for package import order.

Each module is imported first in a fresh interpreter, so a cycle
between subpackages shows up regardless of what the test session
has already loaded.
"""

import os
import subprocess
import sys

import pytest


@pytest.mark.parametrize(
    "module",
    [
        "arbibot.notify",
        "arbibot.notify.telegram",
        "arbibot.strategy",
        "arbibot.strategy.trading",
        "arbibot.simulation",
        "arbibot.core.engine",
        "arbibot.dashboard.server",
        "arbibot.__main__",
    ],
)
def test_module_imports_first(module: str) -> None:
    """Test that the module imports on its own."""
    env = dict(os.environ, PYTHONPATH=os.pathsep.join(sys.path))

    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        capture_output=True,
        text=True,
        env=env,
        timeout=60,
    )

    assert result.returncode == 0, result.stderr
