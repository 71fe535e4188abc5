"""Pytest fixtures.

This file adjusts sys.path for src-layout imports.
"""

# ruff: noqa: E402

import os
import sys

# Ensure `src` is on sys.path so imports like `from esodm.core...` resolve during tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if os.path.isdir(SRC):
    sys.path.insert(0, SRC)
sys.path.insert(0, ROOT)

import pytest
from rich.traceback import install

from esodm.core.criteria import CriteriaQueryCompiler
from esodm.core.esodm import ESODM

# Enable readable tracebacks in development / test environments.
# Can be disabled with PYTEST_RICH=0
if os.getenv("PYTEST_RICH", "1") == "1":
    install(
        show_locals=True,  # show local variables for each frame
        width=None,  # use terminal width
        word_wrap=True,  # wrap long lines
        extra_lines=1,  # some context around lines
        suppress=["/usr/lib/python3", "site-packages"],  # hide "noisy" third-party frames
    )


@pytest.fixture(autouse=True)
def _clean_esodm_env(monkeypatch):
    """Keep ESODM__* variables from the developer shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("ESODM__"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def esodm():
    """Provide a fresh ESODM instance with default configuration."""
    return ESODM.create()


@pytest.fixture
def compiler() -> CriteriaQueryCompiler:
    """Compiler with default options."""
    return CriteriaQueryCompiler()
