"""
Pytest configuration and shared fixtures for the apigen test suite.
"""

import importlib
import itertools
import logging
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

from apigen.api.generator import generate_file


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def examples_dir(project_root):
    """Return the examples directory."""
    return project_root / "examples"


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for generated code output."""
    temp_dir = tempfile.mkdtemp(prefix="apigen_test_")
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="session")
def sample_api_source(examples_dir):
    """Source of the sample business logic module (MyApi / OtherApi)."""
    return (examples_dir / "myapi" / "api.py").read_text(encoding="utf-8")


@pytest.fixture
def gen_log(caplog):
    """Capture records of the apigen.gen logger hierarchy, even when propagation is off."""
    gen_logger = logging.getLogger("apigen.gen")
    gen_logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="apigen.gen")
    yield caplog
    gen_logger.removeHandler(caplog.handler)


_module_ids = itertools.count()


@pytest.fixture
def load_generated(temp_output_dir, monkeypatch):
    """
    Factory fixture: write a source module, generate its handlers next to it
    and import both. Returns (source_module, handlers_module).
    """
    loaded = []

    def _load(source_text: str):
        module_name = f"apigen_sample_{next(_module_ids)}"
        source_path = temp_output_dir / f"{module_name}.py"
        handlers_path = temp_output_dir / f"{module_name}_handlers.py"
        source_path.write_text(source_text, encoding="utf-8")
        generate_file(source_path, handlers_path)

        monkeypatch.syspath_prepend(str(temp_output_dir))
        importlib.invalidate_caches()
        source_module = importlib.import_module(module_name)
        handlers_module = importlib.import_module(f"{module_name}_handlers")
        loaded.extend([module_name, f"{module_name}_handlers"])
        return source_module, handlers_module

    yield _load

    for name in loaded:
        sys.modules.pop(name, None)
