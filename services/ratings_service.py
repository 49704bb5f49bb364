"""Rating lookups against the local ratings API and OMDb"""
import math
import re
from urllib.parse import quote

import requests

from config import Config


ROTTEN_TOMATOES_SOURCE = 'Rotten Tomatoes'

LOCAL_SUMMARY_FIELDS = ('average', 'rating', 'score')

# plain decimal or exponent notation, no underscores, hex or inf/nan words
NUMERIC_STRING = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def to_number(value):
    """Coerce a JSON value to a finite float, or None"""
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, str):
        value = value.strip()
        if not NUMERIC_STRING.fullmatch(value):
            return None

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None

    return number if math.isfinite(number) else None


def average_of_rows(rows):
    """Mean of the rating/score values in a list of rating rows"""
    numbers = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        value = row.get('rating')
        if value is None:
            value = row.get('score')
        number = to_number(value)
        if number is not None:
            numbers.append(number)

    if not numbers:
        return None
    return sum(numbers) / len(numbers)


def summary_value(summary):
    """First of average/rating/score that parses as a number"""
    for field in LOCAL_SUMMARY_FIELDS:
        number = to_number(summary.get(field))
        if number is not None:
            return number
    return None


def parse_local_payload(payload):
    """
    Decode a local ratings API response

    The API answers either with a list of rating rows or with a single
    summary object.

    Returns:
        float or None
    """
    if isinstance(payload, list):
        return average_of_rows(payload)
    if isinstance(payload, dict):
        return summary_value(payload)
    return None


def parse_rotten_tomatoes(payload):
    """
    Pull the Rotten Tomatoes percentage out of an OMDb response

    Only a Value ending in '%' is accepted: '85%' -> 85.0, '8.5/10' -> None.
    """
    if not isinstance(payload, dict):
        return None

    ratings = payload.get('Ratings')
    if not isinstance(ratings, list):
        return None

    entry = next(
        (r for r in ratings if isinstance(r, dict) and r.get('Source') == ROTTEN_TOMATOES_SOURCE),
        None
    )
    if entry is None:
        return None

    value = entry.get('Value')
    if not isinstance(value, str) or not value.endswith('%'):
        return None

    return to_number(value[:-1])


class RatingsService:
    """
    Fetches the two rating signals for a movie.

    Every failure (missing id, missing key, network error, timeout, non-2xx
    status, unexpected payload) comes back as None so callers can carry on
    with partial data.
    """

    def __init__(self, ratings_base=None, ratings_mode=None, omdb_base=None,
                 omdb_api_key=None, timeout=None, session=None):
        self.ratings_base = (ratings_base or Config.RATINGS_API_BASE).rstrip('/')
        self.ratings_mode = (ratings_mode or Config.RATINGS_API_MODE).lower()
        self.omdb_base = (omdb_base or Config.OMDB_API_BASE).rstrip('/')
        self.omdb_api_key = Config.OMDB_API_KEY if omdb_api_key is None else omdb_api_key
        self.timeout = timeout or Config.RATINGS_HTTP_TIMEOUT
        # requests.get opens a fresh session per call, safe across threads
        self.http = session or requests

    def local_rating_url(self, imdb_id, internal_id):
        """URL for the local ratings API, or None when the routing id is missing"""
        if self.ratings_mode == 'movieid':
            if internal_id is None:
                return None
            ratings_id = internal_id
        else:
            if not imdb_id:
                return None
            ratings_id = imdb_id

        return f"{self.ratings_base}/ratings/{quote(str(ratings_id), safe='')}"

    def _get_json(self, url, params=None):
        try:
            response = self.http.get(url, params=params, timeout=self.timeout)
        except requests.RequestException:
            return None

        if not 200 <= response.status_code < 300:
            return None

        try:
            return response.json()
        except ValueError:
            return None

    def fetch_local_rating(self, imdb_id, internal_id):
        url = self.local_rating_url(imdb_id, internal_id)
        if url is None:
            return None

        payload = self._get_json(url)
        if payload is None:
            return None
        return parse_local_payload(payload)

    def fetch_rotten_tomatoes(self, imdb_id):
        if not imdb_id or not self.omdb_api_key:
            return None

        payload = self._get_json(
            f"{self.omdb_base}/",
            params={'apikey': self.omdb_api_key, 'i': imdb_id}
        )
        if payload is None:
            return None
        return parse_rotten_tomatoes(payload)
