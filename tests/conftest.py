"""
Shared fixtures for indsketch tests
"""
import pytest
from indsketch.core.tester import InclusionTester


@pytest.fixture
def tester():
    return InclusionTester(error=0.01)
