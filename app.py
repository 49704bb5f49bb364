from flask import Flask, jsonify, request
from flask_cors import CORS
from config import Config
import logging

import psycopg2

from services.postgres_check import check_postgres
from services.movie_service import MovieService
from services.ratings_service import RatingsService
from database.movies_db import MovieRepository

from metrics import (
    metrics_endpoint, track_request,
    MOVIE_DETAIL_VIEWS, RATING_SOURCES_AVAILABLE
)

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = Flask(__name__)
app.config.from_object(Config)
CORS(app)

movie_repository = MovieRepository()
ratings_service = RatingsService()
movie_service = MovieService(movie_repository, ratings_service)


class ValidationError(ValueError):
    """Bad path or query parameter"""
    code = 400


def positive_int_arg(name, default, maximum=None):
    raw = request.args.get(name, '').strip()
    if not raw:
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f'"{name}" must be an integer')

    if value < 1:
        raise ValidationError(f'"{name}" must be a positive integer')
    if maximum is not None and value > maximum:
        raise ValidationError(f'"{name}" must be at most {maximum}')
    return value


def page_args():
    page = positive_int_arg('page', 1)
    per_page = positive_int_arg('perPage', Config.DEFAULT_PER_PAGE, Config.MAX_PER_PAGE)
    return page, per_page


def parse_year(raw):
    try:
        year = int(raw)
    except ValueError:
        raise ValidationError('year must be an integer')

    if not 1800 <= year <= 3000:
        raise ValidationError('year must be between 1800 and 3000')
    return year


def order_arg():
    order = request.args.get('order', 'asc').strip().lower() or 'asc'
    if order not in ('asc', 'desc'):
        raise ValidationError('"order" must be "asc" or "desc"')
    return order


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(psycopg2.Error)
def handle_database_error(e):
    logger.exception(f"Database error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


@app.route('/api/heartbeat')
def heartbeat():
    return jsonify({'ok': True, 'service': 'movie-api-backend'})


@app.route('/api/movies')
@track_request
def list_movies():
    page, per_page = page_args()
    return jsonify(movie_service.list_all(page, per_page))


@app.route('/api/movies/year/<year>')
@track_request
def list_movies_by_year(year):
    page, per_page = page_args()
    data = movie_service.list_by_year(parse_year(year), page, per_page, order_arg())
    return jsonify(data)


@app.route('/api/movies/genre/<genre>')
@track_request
def list_movies_by_genre(genre):
    page, per_page = page_args()
    genre = genre.strip()
    if not genre:
        raise ValidationError('genre must not be empty')

    return jsonify(movie_service.list_by_genre(genre, page, per_page))


@app.route('/api/movies/<imdb_id>')
@track_request
def movie_detail(imdb_id):
    if len(imdb_id) < 2:
        raise ValidationError('imdbId must be at least 2 characters')

    data = movie_service.details(imdb_id)

    if not data:
        MOVIE_DETAIL_VIEWS.labels(found='false').inc()
        return jsonify({'error': 'Not found'}), 404

    MOVIE_DETAIL_VIEWS.labels(found='true').inc()
    RATING_SOURCES_AVAILABLE.observe(len(data['ratings']))
    return jsonify(data)


@app.route('/check/postgres')
def check_postgres_endpoint():
    result = check_postgres()
    status_code = 200 if result['status'] == 'healthy' else 503
    return jsonify(result), status_code


@app.route('/metrics')
def metrics():
    return metrics_endpoint()


if __name__ == '__main__':
    logger.info(f"Ratings API: {Config.RATINGS_API_BASE} (mode={Config.RATINGS_API_MODE})")
    logger.info(f"OMDb API: {Config.OMDB_API_BASE} (key configured: {bool(Config.OMDB_API_KEY)})")
    logger.info(f"[movie-api] listening on http://{Config.FLASK_HOST}:{Config.FLASK_PORT}")
    app.run(
        host=Config.FLASK_HOST,
        port=Config.FLASK_PORT,
        debug=Config.FLASK_DEBUG
    )
