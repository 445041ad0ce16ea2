import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'safemarkup'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from safemarkup.core.markup import PlaceholderFormatter, SafeStringRegistry


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Developer shells must not leak SAFEMARKUP_* overrides into tests."""
    for key in list(os.environ):
        if key.startswith("SAFEMARKUP_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def registry() -> SafeStringRegistry:
    """A fresh registry for one unit of work."""
    return SafeStringRegistry()


@pytest.fixture
def formatter(registry: SafeStringRegistry) -> PlaceholderFormatter:
    """A formatter bound to the ``registry`` fixture, using built-in defaults."""
    return PlaceholderFormatter(registry)
