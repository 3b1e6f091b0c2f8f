"""Shared pytest fixtures."""

from __future__ import annotations

import pytest


class ScriptedRng:
    """Random source that replays a fixed sequence of draws."""

    def __init__(self, values):
        self.values = list(values)

    def random(self) -> float:
        if not self.values:
            raise AssertionError("random source exhausted")
        return self.values.pop(0)


@pytest.fixture
def scripted():
    """Factory for :class:`ScriptedRng`: ``scripted([0.5, 0.1])``."""
    return ScriptedRng
