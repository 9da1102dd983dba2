"""Pytest configuration and fixtures for lab tests."""

import random

import pytest

from cellmaster.catalog import default_catalog
from cellmaster.simulation import LabActions, LabEngine, LabSession
from tests.fakes.scripted_rng import ScriptedRandom


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def scripted_rng():
    """RNG whose random()/randint() draws can be scripted per test."""
    return ScriptedRandom()


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def session():
    """A fresh medium lab with a fixed seed."""
    return LabSession.new("medium", seed=42)


@pytest.fixture
def engine(session):
    """Setup a lab engine over the seeded session."""
    return LabEngine(session)


@pytest.fixture
def actions(session):
    return LabActions(session)


@pytest.fixture
def scripted_session(scripted_rng):
    """A medium lab whose subsystems all draw from ``scripted_rng``.

    The contract pool is generated with the seeded fallback before any
    script is pushed, so tests start from an empty script.
    """
    return LabSession.new("medium", rng=scripted_rng)
