import sys
import tempfile
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rescope.config.models import RuntimeSettings  # noqa: E402
from rescope.container import Runtime  # noqa: E402
from rescope.modules.registry import Registry  # noqa: E402
from rescope.scope.scope import Scope  # noqa: E402


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return RuntimeSettings(_env_file=None)


@pytest.fixture
def runtime(settings):
    """A fresh runtime; never shared between tests."""
    return Runtime(settings)


@pytest.fixture
def registry():
    """A fresh registry with an empty 'app' module."""
    registry = Registry()
    registry.define_module("app")
    return registry


@pytest.fixture
def root():
    """A fresh root scope."""
    return Scope()


@pytest.fixture
def sample_yaml_settings(temp_dir):
    """Create a sample YAML settings file."""
    path = temp_dir / "rescope.yaml"
    path.write_text("""
digest_ttl: 25
duplicate_policy: error
strict_di: true
log_level: debug
modules:
  - app
""")
    return path


@pytest.fixture
def sample_json_settings(temp_dir):
    """Create a sample JSON settings file."""
    path = temp_dir / "rescope.json"
    path.write_text("""{
    "digest_ttl": 5,
    "modules": ["app", "widgets"]
}""")
    return path
