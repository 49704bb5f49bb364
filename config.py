import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    FLASK_HOST = os.getenv('FLASK_HOST', '0.0.0.0')
    FLASK_PORT = int(os.getenv('FLASK_PORT', '4000'))
    FLASK_DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()


    POSTGRES_HOST = os.getenv('POSTGRES_HOST', 'localhost')
    POSTGRES_PORT = int(os.getenv('POSTGRES_PORT', '5432'))
    POSTGRES_DB = os.getenv('POSTGRES_DB', 'movies')
    POSTGRES_USER = os.getenv('POSTGRES_USER', 'postgres')
    POSTGRES_PASSWORD = os.getenv('POSTGRES_PASSWORD', '')
    POSTGRES_SSLMODE = os.getenv('POSTGRES_SSLMODE', 'prefer')
    POSTGRES_POOL_MIN = int(os.getenv('POSTGRES_POOL_MIN', '1'))
    POSTGRES_POOL_MAX = int(os.getenv('POSTGRES_POOL_MAX', '10'))


    # Local ratings API, routed by imdb id or internal movie id
    RATINGS_API_BASE = os.getenv('RATINGS_API_BASE', 'http://localhost:3000')
    RATINGS_API_MODE = os.getenv('RATINGS_API_MODE', 'imdb').lower()


    OMDB_API_BASE = os.getenv('OMDB_API_BASE', 'https://www.omdbapi.com')
    OMDB_API_KEY = os.getenv('OMDB_API_KEY', '')

    RATINGS_HTTP_TIMEOUT = float(os.getenv('RATINGS_HTTP_TIMEOUT', '5'))


    DEFAULT_PER_PAGE = int(os.getenv('DEFAULT_PER_PAGE', '50'))
    MAX_PER_PAGE = int(os.getenv('MAX_PER_PAGE', '200'))
