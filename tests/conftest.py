"""
Shared fixtures.
"""

import pytest

from config.settings import Settings
from monitoring.models import CardIdentity


@pytest.fixture
def settings(tmp_path):
    return Settings(
        output_folder=tmp_path,
        settle_delay=0,
        click_delay=0,
        monitor_interval=0,
        monitor_variance=0,
        retry_delay=0,
        pause_poll_interval=0,
    )


@pytest.fixture
def pikachu():
    return CardIdentity("Pikachu", "SVP", "27")


@pytest.fixture
def charizard():
    return CardIdentity("Charizard", "OBF", "125")
