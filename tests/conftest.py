"""Shared fixtures for importer tests."""

import pathlib
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from csvgraph.core.graph import Graph  # noqa: E402

# ======================================================================
# FIXTURES
# ======================================================================


@pytest.fixture
def graph():
    """Directed, unweighted, self-loops and parallel edges allowed."""
    return Graph(directed=True, allow_multi_edges=True)


@pytest.fixture
def weighted_graph():
    """Directed weighted graph with self-loops and parallel edges allowed."""
    return Graph(directed=True, weighted=True, allow_multi_edges=True)


@pytest.fixture
def tmpdir_fixture():
    """Temporary directory for file input tests."""
    tmpdir = Path(tempfile.mkdtemp())
    yield tmpdir
    shutil.rmtree(tmpdir)
