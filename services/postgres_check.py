import psycopg2
from config import Config


def check_postgres():
    try:
        conn = psycopg2.connect(
            host=Config.POSTGRES_HOST,
            port=Config.POSTGRES_PORT,
            database=Config.POSTGRES_DB,
            user=Config.POSTGRES_USER,
            password=Config.POSTGRES_PASSWORD,
            connect_timeout=5,
            sslmode=Config.POSTGRES_SSLMODE
        )

        try:
            conn.set_session(readonly=True)
            cursor = conn.cursor()

            cursor.execute("SELECT version();")
            version = cursor.fetchone()[0]

            cursor.execute("SELECT pg_size_pretty(pg_database_size(current_database()));")
            db_size = cursor.fetchone()[0]

            # Catalog coverage
            cursor.execute("""
                SELECT
                    COUNT(*),
                    COUNT("imdbId"),
                    COUNT("releaseDate"),
                    MIN("releaseDate"),
                    MAX("releaseDate")
                FROM movies;
            """)
            total, with_imdb, with_release, earliest, latest = cursor.fetchone()

            cursor.close()
        finally:
            conn.close()

        return {
            'status': 'healthy',
            'service': 'postgresql',
            'message': 'Successfully connected to PostgreSQL',
            'details': {
                'connection': {
                    'host': Config.POSTGRES_HOST,
                    'port': Config.POSTGRES_PORT,
                    'database': Config.POSTGRES_DB
                },
                'version': version.split()[1],
                'database': {
                    'size': db_size
                },
                'catalog': {
                    'movies': total,
                    'with_imdb_id': with_imdb,
                    'with_release_date': with_release,
                    'earliest_release': earliest,
                    'latest_release': latest,
                    'imdb_coverage_percent': round((with_imdb / total) * 100, 2) if total > 0 else 0
                }
            }
        }

    except psycopg2.OperationalError as e:
        return {
            'status': 'unhealthy',
            'service': 'postgresql',
            'message': f'Connection error: {str(e)}'
        }
    except psycopg2.Error as e:
        return {
            'status': 'unhealthy',
            'service': 'postgresql',
            'message': f'Query error: {str(e)}'
        }
