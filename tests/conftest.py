"""Pytest configuration."""

import pytest

from fakes import ROOT, FakeWindowSystem


@pytest.fixture
def system():
    """Empty 1200x800 screen with nothing focused."""
    return FakeWindowSystem()


@pytest.fixture
def nested_system(system):
    """root -> A (0x200) -> B (0x300) -> focused child (0x400)."""
    system.add_window(0x200, ROOT, height=500, name="Terminal")
    system.add_window(0x300, 0x200, height=480)
    system.add_window(0x400, 0x300, height=20)
    system.focus = 0x400
    return system
