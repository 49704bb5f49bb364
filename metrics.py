from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, request
import time
import functools


REQUEST_COUNT = Counter(
    'movie_api_request_count',
    'Total Movie API Request Count',
    ['method', 'endpoint', 'http_status']
)

REQUEST_DURATION = Histogram(
    'movie_api_request_duration_seconds',
    'Movie API Request Duration',
    ['method', 'endpoint']
)


MOVIE_DETAIL_VIEWS = Counter(
    'movie_api_detail_views_total',
    'Total movie detail lookups',
    ['found']
)

RATING_SOURCES_AVAILABLE = Histogram(
    'movie_api_rating_sources',
    'Number of rating sources available per detail response',
    buckets=(0, 1, 2)
)


def _status_code(response):
    if isinstance(response, tuple):
        return response[1] if len(response) > 1 else 200
    return getattr(response, 'status_code', 200)


def track_request(f):
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        start_time = time.time()

        try:
            response = f(*args, **kwargs)

            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=f.__name__,
                http_status=_status_code(response)
            ).inc()

            duration = time.time() - start_time
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=f.__name__
            ).observe(duration)

            return response

        except Exception as e:
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=f.__name__,
                http_status=getattr(e, 'code', 500)
            ).inc()
            raise

    return wrapper


def metrics_endpoint():
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
