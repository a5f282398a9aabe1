"""
Test configuration — puts the repo root on sys.path so the flat modules
(config, defaults, model, build_excel_model) import without installation.
"""

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from defaults import reference_defaults  # noqa: E402
from model import compute  # noqa: E402


@pytest.fixture
def inputs():
    return reference_defaults()


@pytest.fixture
def results(inputs):
    return compute(inputs)
