import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


def movie_row(**overrides):
    row = {
        'movieId': 1,
        'imdbId': 'tt1234567',
        'title': 'Test Movie',
        'overview': 'A test movie description',
        'genres': '[{"name":"Action"},{"name":"Adventure"}]',
        'releaseDate': '2020-05-15',
        'budget': 100000000,
        'runtime': 120,
        'language': 'en',
        'productionCompanies': '[{"name":"Warner Bros"},{"name":"Universal"}]',
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_movie():
    return movie_row


@pytest.fixture
def fake_pool():
    """Connection pool whose single connection hands out one shared cursor"""
    cursor = MagicMock(name='cursor')
    cursor.fetchall.return_value = []
    cursor.fetchone.return_value = None

    conn = MagicMock(name='connection')
    conn.closed = 0
    conn.cursor.return_value.__enter__.return_value = cursor

    pool = MagicMock(name='pool')
    pool.getconn.return_value = conn
    pool.cursor = cursor
    pool.conn = conn
    return pool
