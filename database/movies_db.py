"""Read-only access to the movies catalog in PostgreSQL"""
import logging
import threading
from contextlib import contextmanager

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from config import Config

logger = logging.getLogger(__name__)


MOVIE_COLUMNS = """
    "movieId", "imdbId", title, overview, genres, "releaseDate",
    budget, runtime, language, "productionCompanies"
"""

# genres text is lower-cased and stripped of spaces before matching
GENRE_MATCH = """lower(replace(genres, ' ', '')) LIKE %s"""


def create_connection_pool():
    """Create the shared connection pool for catalog reads"""
    logger.info(
        f"Opening PostgreSQL pool {Config.POSTGRES_HOST}:{Config.POSTGRES_PORT}/{Config.POSTGRES_DB} "
        f"(min={Config.POSTGRES_POOL_MIN}, max={Config.POSTGRES_POOL_MAX})"
    )
    return ThreadedConnectionPool(
        Config.POSTGRES_POOL_MIN,
        Config.POSTGRES_POOL_MAX,
        host=Config.POSTGRES_HOST,
        port=Config.POSTGRES_PORT,
        database=Config.POSTGRES_DB,
        user=Config.POSTGRES_USER,
        password=Config.POSTGRES_PASSWORD,
        sslmode=Config.POSTGRES_SSLMODE,
        connect_timeout=5
    )


def year_key(year):
    """Render a year the way it prefixes releaseDate ('1994-09-23' -> '1994')"""
    return f"{int(year):04d}"


def genre_like_pattern(genre):
    """
    Build the LIKE pattern matching a genre entry in serialized genres text

    The term is lower-cased and stripped of spaces to line up with the
    normalized column, and LIKE wildcards are escaped so they match literally.

    Args:
        genre: genre name as requested, e.g. 'Science Fiction'

    Returns:
        str: pattern such as '%"name":"sciencefiction"%'
    """
    term = genre.lower().replace(' ', '')
    term = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%"name":"{term}"%'


def sort_direction(order):
    return 'DESC' if str(order).upper() == 'DESC' else 'ASC'


class MovieRepository:
    """
    Parameterized reads against the movies table.

    Rows come back as plain dicts keyed by column name. genres and
    productionCompanies are returned as the raw serialized text.
    """

    def __init__(self, pool=None, max_connections=None):
        self._pool = pool
        self._pool_lock = threading.Lock()
        # getconn raises PoolError when exhausted, so callers queue here instead
        self._slots = threading.BoundedSemaphore(max_connections or Config.POSTGRES_POOL_MAX)

    @property
    def pool(self):
        if self._pool is None:
            with self._pool_lock:
                if self._pool is None:
                    self._pool = create_connection_pool()
        return self._pool

    @contextmanager
    def _cursor(self):
        pool = self.pool
        with self._slots:
            conn = pool.getconn()
            try:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    yield cursor
            finally:
                try:
                    if not conn.closed:
                        # end the read transaction before handing the connection back
                        conn.rollback()
                except psycopg2.Error as e:
                    logger.warning(f"Discarding broken connection: {e}")
                finally:
                    pool.putconn(conn, close=bool(conn.closed))

    def _fetch_all(self, query, params=()):
        with self._cursor() as cursor:
            logger.debug(f"Query params={params}")
            cursor.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

    def _fetch_one(self, query, params=()):
        with self._cursor() as cursor:
            logger.debug(f"Query params={params}")
            cursor.execute(query, params)
            row = cursor.fetchone()
        return dict(row) if row else None

    def _count(self, query, params=()):
        row = self._fetch_one(query, params)
        return int(row['c']) if row else 0

    def count_all(self):
        return self._count("SELECT COUNT(*) AS c FROM movies")

    def list_all(self, offset, limit):
        return self._fetch_all(f"""
            SELECT {MOVIE_COLUMNS}
            FROM movies
            ORDER BY "releaseDate" ASC, "movieId" ASC
            LIMIT %s OFFSET %s
        """, (limit, offset))

    def find_by_imdb_id(self, imdb_id):
        return self._fetch_one(f"""
            SELECT {MOVIE_COLUMNS}
            FROM movies
            WHERE "imdbId" = %s
            LIMIT 1
        """, (imdb_id,))

    def find_by_id(self, movie_id):
        return self._fetch_one(f"""
            SELECT {MOVIE_COLUMNS}
            FROM movies
            WHERE "movieId" = %s
        """, (movie_id,))

    def count_by_year(self, year):
        return self._count("""
            SELECT COUNT(*) AS c
            FROM movies
            WHERE substr("releaseDate", 1, 4) = %s
        """, (year_key(year),))

    def list_by_year(self, year, offset, limit, order='asc'):
        direction = sort_direction(order)
        return self._fetch_all(f"""
            SELECT {MOVIE_COLUMNS}
            FROM movies
            WHERE substr("releaseDate", 1, 4) = %s
            ORDER BY "releaseDate" {direction}, "movieId" ASC
            LIMIT %s OFFSET %s
        """, (year_key(year), limit, offset))

    def count_by_genre(self, genre):
        return self._count(f"""
            SELECT COUNT(*) AS c
            FROM movies
            WHERE {GENRE_MATCH}
        """, (genre_like_pattern(genre),))

    def list_by_genre(self, genre, offset, limit):
        return self._fetch_all(f"""
            SELECT {MOVIE_COLUMNS}
            FROM movies
            WHERE {GENRE_MATCH}
            ORDER BY "releaseDate" ASC, "movieId" ASC
            LIMIT %s OFFSET %s
        """, (genre_like_pattern(genre), limit, offset))
