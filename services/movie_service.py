"""Shapes catalog rows into list and detail views"""
import json
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal('0.01')


def parse_names(text):
    """
    Turn serialized genres/companies text into a list of display names

    Accepts a JSON array of strings or of objects with a 'name'. Anything
    that does not decode to a list gives [], and empty names are dropped.
    """
    if not text:
        return []

    try:
        entries = json.loads(text)
    except (TypeError, ValueError):
        return []

    if not isinstance(entries, list):
        return []

    names = []
    for entry in entries:
        if isinstance(entry, str):
            name = entry
        elif isinstance(entry, dict):
            name = entry.get('name')
        else:
            name = None
        if name and isinstance(name, str):
            names.append(name)
    return names


def format_usd(amount):
    """Whole-dollar US currency: 100000000 -> '$100,000,000', None -> None"""
    if amount is None:
        return None

    dollars = Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    sign = '-' if dollars < 0 else ''
    return f"{sign}${abs(dollars):,}"


def round_rating(value):
    # half-up on the decimal value, so 46.665 -> 46.67
    return float(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def average_rating(ratings):
    if not ratings:
        return None
    total = sum(Decimal(str(r['value'])) for r in ratings)
    return round_rating(total / len(ratings))


def budget_view(amount):
    return {'raw': amount, 'usd': format_usd(amount)}


def to_list_item(row):
    return {
        'imdbId': row.get('imdbId'),
        'title': row.get('title'),
        'genres': parse_names(row.get('genres')),
        'releaseDate': row.get('releaseDate'),
        'budget': budget_view(row.get('budget'))
    }


def list_page(page, per_page, total, rows):
    return {
        'page': page,
        'perPage': per_page,
        'total': total,
        'items': [to_list_item(row) for row in rows]
    }


def offset_for(page, per_page):
    """Row offset of a 1-based page"""
    return (page - 1) * per_page


class MovieService:
    """
    Catalog queries on top of MovieRepository and RatingsService.

    Callers supply page >= 1 and per_page > 0.
    """

    def __init__(self, repo, ratings):
        self.repo = repo
        self.ratings = ratings

    def list_all(self, page, per_page):
        total = self.repo.count_all()
        rows = self.repo.list_all(offset_for(page, per_page), per_page)
        return list_page(page, per_page, total, rows)

    def list_by_year(self, year, page, per_page, order='asc'):
        total = self.repo.count_by_year(year)
        rows = self.repo.list_by_year(year, offset_for(page, per_page), per_page, order)
        return list_page(page, per_page, total, rows)

    def list_by_genre(self, genre, page, per_page):
        total = self.repo.count_by_genre(genre)
        rows = self.repo.list_by_genre(genre, offset_for(page, per_page), per_page)
        return list_page(page, per_page, total, rows)

    def fetch_ratings(self, imdb_id, movie_id):
        """
        Query both rating sources in parallel

        Returns:
            list: [{'source': ..., 'value': ...}], Local first
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            local_future = executor.submit(self.ratings.fetch_local_rating, imdb_id, movie_id)
            rt_future = executor.submit(self.ratings.fetch_rotten_tomatoes, imdb_id)
            local = local_future.result()
            rt = rt_future.result()

        ratings = []
        if local is not None:
            ratings.append({'source': 'Local', 'value': round_rating(local)})
        if rt is not None:
            ratings.append({'source': 'RottenTomatoes', 'value': round_rating(rt)})
        return ratings

    def details(self, imdb_id):
        row = self.repo.find_by_imdb_id(imdb_id)
        if not row:
            return None

        ratings = self.fetch_ratings(row.get('imdbId'), row.get('movieId'))

        return {
            'imdbId': row.get('imdbId'),
            'title': row.get('title'),
            'description': row.get('overview'),
            'releaseDate': row.get('releaseDate'),
            'budget': budget_view(row.get('budget')),
            'runtime': row.get('runtime'),
            'averageRating': average_rating(ratings),
            'ratings': ratings,
            'genres': parse_names(row.get('genres')),
            'originalLanguage': row.get('language'),
            'productionCompanies': parse_names(row.get('productionCompanies'))
        }
