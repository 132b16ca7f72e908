"""Shared fixtures for py_potts tests."""

import pytest

from py_potts.core.alea_prng import AleaPRNG


@pytest.fixture
def prng():
    return AleaPRNG("potts_test")
