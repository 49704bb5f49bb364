import threading
from unittest.mock import MagicMock

import pytest

from services.movie_service import (
    MovieService, parse_names, format_usd, round_rating, average_rating
)


@pytest.fixture
def repo():
    repo = MagicMock(name='repo')
    repo.count_all.return_value = 0
    repo.list_all.return_value = []
    return repo


@pytest.fixture
def ratings():
    ratings = MagicMock(name='ratings')
    ratings.fetch_local_rating.return_value = None
    ratings.fetch_rotten_tomatoes.return_value = None
    return ratings


@pytest.fixture
def service(repo, ratings):
    return MovieService(repo, ratings)


# --- list views ---

def test_list_all_paginates(service, repo, make_movie):
    repo.count_all.return_value = 10
    repo.list_all.return_value = [make_movie(movieId=1, title='Movie 1'), make_movie(movieId=2, title='Movie 2')]

    result = service.list_all(1, 2)

    repo.list_all.assert_called_once_with(0, 2)
    assert result['page'] == 1
    assert result['perPage'] == 2
    assert result['total'] == 10
    assert [item['title'] for item in result['items']] == ['Movie 1', 'Movie 2']


@pytest.mark.parametrize('page, per_page, offset', [(2, 5, 5), (3, 10, 20), (1, 50, 0)])
def test_list_all_offsets(service, repo, page, per_page, offset):
    service.list_all(page, per_page)
    repo.list_all.assert_called_once_with(offset, per_page)


def test_list_item_shape(service, repo, make_movie):
    repo.count_all.return_value = 1
    repo.list_all.return_value = [make_movie()]

    item = service.list_all(1, 10)['items'][0]

    assert item == {
        'imdbId': 'tt1234567',
        'title': 'Test Movie',
        'genres': ['Action', 'Adventure'],
        'releaseDate': '2020-05-15',
        'budget': {'raw': 100000000, 'usd': '$100,000,000'},
    }


def test_list_item_missing_budget_and_genres(service, repo, make_movie):
    repo.list_all.return_value = [make_movie(budget=None, genres='invalid json')]

    item = service.list_all(1, 10)['items'][0]

    assert item['budget'] == {'raw': None, 'usd': None}
    assert item['genres'] == []


def test_list_item_zero_budget(service, repo, make_movie):
    repo.list_all.return_value = [make_movie(budget=0)]

    assert service.list_all(1, 10)['items'][0]['budget'] == {'raw': 0, 'usd': '$0'}


def test_list_by_year(service, repo, make_movie):
    repo.count_by_year.return_value = 4
    repo.list_by_year.return_value = [
        make_movie(releaseDate='1994-12-01'),
        make_movie(releaseDate='1994-01-01'),
    ]

    result = service.list_by_year(1994, 2, 2, 'desc')

    repo.count_by_year.assert_called_once_with(1994)
    repo.list_by_year.assert_called_once_with(1994, 2, 2, 'desc')
    assert result['total'] == 4
    assert [item['releaseDate'] for item in result['items']] == ['1994-12-01', '1994-01-01']


def test_list_by_genre(service, repo, make_movie):
    repo.count_by_genre.return_value = 1
    repo.list_by_genre.return_value = [make_movie()]

    result = service.list_by_genre('action', 3, 25)

    repo.count_by_genre.assert_called_once_with('action')
    repo.list_by_genre.assert_called_once_with('action', 50, 25)
    assert result['page'] == 3
    assert result['perPage'] == 25
    assert result['items'][0]['genres'] == ['Action', 'Adventure']


# --- detail view ---

def test_details_with_both_ratings(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie()
    ratings.fetch_local_rating.return_value = 8.5
    ratings.fetch_rotten_tomatoes.return_value = 85

    result = service.details('tt1234567')

    assert result['ratings'] == [
        {'source': 'Local', 'value': 8.5},
        {'source': 'RottenTomatoes', 'value': 85},
    ]
    assert result['averageRating'] == 46.75


def test_details_fields(service, repo, make_movie):
    repo.find_by_imdb_id.return_value = make_movie(budget=50000000, productionCompanies=None)

    result = service.details('tt1234567')

    assert result == {
        'imdbId': 'tt1234567',
        'title': 'Test Movie',
        'description': 'A test movie description',
        'releaseDate': '2020-05-15',
        'budget': {'raw': 50000000, 'usd': '$50,000,000'},
        'runtime': 120,
        'averageRating': None,
        'ratings': [],
        'genres': ['Action', 'Adventure'],
        'originalLanguage': 'en',
        'productionCompanies': [],
    }


def test_details_average_rating(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie()
    ratings.fetch_local_rating.return_value = 8.0
    ratings.fetch_rotten_tomatoes.return_value = 90

    assert service.details('tt1234567')['averageRating'] == 49.0


def test_details_average_rounded_to_two_places(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie()
    ratings.fetch_local_rating.return_value = 8.333
    ratings.fetch_rotten_tomatoes.return_value = 85

    result = service.details('tt1234567')

    assert result['ratings'][0] == {'source': 'Local', 'value': 8.33}
    assert result['averageRating'] == 46.67


def test_details_local_only(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie()
    ratings.fetch_local_rating.return_value = 7.5

    result = service.details('tt1234567')

    assert result['ratings'] == [{'source': 'Local', 'value': 7.5}]
    assert result['averageRating'] == 7.5


def test_details_rotten_tomatoes_only(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie()
    ratings.fetch_rotten_tomatoes.return_value = 80

    result = service.details('tt1234567')

    assert result['ratings'] == [{'source': 'RottenTomatoes', 'value': 80}]
    assert result['averageRating'] == 80


def test_details_local_rating_rounded(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie()
    ratings.fetch_local_rating.return_value = 8.3456789

    assert service.details('tt1234567')['ratings'][0]['value'] == 8.35


def test_details_passes_both_ids(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie(movieId=42, imdbId='tt1234567')

    service.details('tt1234567')

    ratings.fetch_local_rating.assert_called_once_with('tt1234567', 42)
    ratings.fetch_rotten_tomatoes.assert_called_once_with('tt1234567')


def test_details_fetches_ratings_in_parallel(service, repo, ratings, make_movie):
    repo.find_by_imdb_id.return_value = make_movie()
    both_started = threading.Barrier(2, timeout=1)

    def local_rating(imdb_id, movie_id):
        both_started.wait()
        return 7.0

    def rotten_tomatoes(imdb_id):
        both_started.wait()
        return 90

    ratings.fetch_local_rating.side_effect = local_rating
    ratings.fetch_rotten_tomatoes.side_effect = rotten_tomatoes

    result = service.details('tt1234567')

    assert result['ratings'] == [
        {'source': 'Local', 'value': 7.0},
        {'source': 'RottenTomatoes', 'value': 90},
    ]
    assert result['averageRating'] == 48.5


def test_details_not_found_skips_ratings(service, repo, ratings):
    repo.find_by_imdb_id.return_value = None

    assert service.details('tt9999999') is None
    ratings.fetch_local_rating.assert_not_called()
    ratings.fetch_rotten_tomatoes.assert_not_called()


# --- helpers ---

@pytest.mark.parametrize('text, expected', [
    (None, []),
    ('', []),
    ('invalid json', []),
    ('{"name": "Action"}', []),
    ('["Drama", "", null, "Crime"]', ['Drama', 'Crime']),
    ('[{"name": "Action"}, {"name": ""}, {"id": 12}, {"name": null}, 7]', ['Action']),
    ('[{"id": 28, "name": "Action"}, "Thriller"]', ['Action', 'Thriller']),
])
def test_parse_names(text, expected):
    assert parse_names(text) == expected


def test_parse_names_is_idempotent():
    text = '[{"name":"Warner Bros"},{"name":"Universal"}]'
    assert parse_names(text) == parse_names(text) == ['Warner Bros', 'Universal']


@pytest.mark.parametrize('amount, expected', [
    (None, None),
    (0, '$0'),
    (1500, '$1,500'),
    (100000000, '$100,000,000'),
    (999999999, '$999,999,999'),
    (999999999.5, '$1,000,000,000'),
    (-1234, '-$1,234'),
])
def test_format_usd(amount, expected):
    assert format_usd(amount) == expected


def test_round_rating_half_up():
    assert round_rating(8.333) == 8.33
    assert round_rating(46.665) == 46.67
    assert round_rating(0.125) == 0.13
    assert round_rating(85) == 85.0


def test_average_rating():
    assert average_rating([]) is None
    assert average_rating([{'source': 'Local', 'value': 7.5}]) == 7.5
    assert average_rating([{'source': 'Local', 'value': 8.33}, {'source': 'RottenTomatoes', 'value': 85.0}]) == 46.67
