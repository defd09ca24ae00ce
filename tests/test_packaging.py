"""Tests for the project metadata."""

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")


PYPROJECT = Path(__file__).parent.parent / "pyproject.toml"


@pytest.fixture
def project():
    with open(PYPROJECT, "rb") as f:
        return tomllib.load(f)["project"]


def test_core_has_no_runtime_dependencies(project):
    """The interpreter and transpiler install without the web demo stack."""
    assert project["dependencies"] == []


def test_demo_extra(project):
    """gradio is only pulled in by the demo extra."""
    extras = project["optional-dependencies"]
    assert extras["demo"] == ["gradio"]
    assert "pytest" in extras["test"]
