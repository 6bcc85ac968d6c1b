"""Shared test fixtures."""

from pathlib import Path

import pytest

from scorebook.reader import read_matches, read_roster


DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


@pytest.fixture(scope='session')
def data_dir() -> Path:
    """Path to the data directory."""
    return DATA_DIR


@pytest.fixture(scope='session')
def roster():
    """All players from roster.csv."""
    return read_roster(DATA_DIR / 'roster.csv')


@pytest.fixture(scope='session')
def history(roster):
    """All readable matches from matches.csv."""
    return read_matches(DATA_DIR / 'matches.csv', roster)
