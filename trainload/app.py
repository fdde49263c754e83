from flask import Flask, request, jsonify, g
import psycopg2
import psycopg2.pool
import psycopg2.extras  # For RealDictCursor
import os
from urllib.parse import urlparse
import logging
import jwt # For bearer token verification
from functools import wraps # For creating decorators
import atexit
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

app = Flask(__name__)

# --- Rate Limiter Configuration ---
# Point at Redis in deployment; the in-memory store is only good for a single process
RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    storage_uri=RATELIMIT_STORAGE_URL,
    strategy="fixed-window",
    enabled=os.getenv("RATELIMIT_ENABLED", "true").lower() != "false",
)
limiter.init_app(app)


# --- Database Connection Pool Configuration ---
MIN_DB_CONNECTIONS = 1
MAX_DB_CONNECTIONS = 10
db_pool = None

def get_db_connection_params():
    """Determines database connection parameters."""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        try:
            url = urlparse(database_url)
            return {
                'dbname': url.path[1:],
                'user': url.username,
                'password': url.password,
                'host': url.hostname,
                'port': url.port
            }
        except Exception as e:
            app.logger.error(f"Failed to parse DATABASE_URL: {e}. Falling back to POSTGRES_* vars.")

    return {
        'dbname': os.getenv("POSTGRES_DB"),
        'user': os.getenv("POSTGRES_USER"),
        'password': os.getenv("POSTGRES_PASSWORD"),
        'host': os.getenv("POSTGRES_HOST"),
        'port': os.getenv("POSTGRES_PORT", "5432")
    }

def init_db_pool():
    """Initializes the database connection pool."""
    global db_pool
    if db_pool is None:
        try:
            params = get_db_connection_params()
            if not all(params.values()): # Check if any crucial param is None or empty
                 app.logger.error("Database connection parameters are incomplete. Pool not initialized.")
                 return

            app.logger.info(f"Initializing database connection pool for host '{params.get('host')}' db '{params.get('dbname')}'")
            db_pool = psycopg2.pool.SimpleConnectionPool(
                MIN_DB_CONNECTIONS,
                MAX_DB_CONNECTIONS,
                **params
            )
            app.logger.info("Database connection pool initialized successfully.")
        except psycopg2.OperationalError as e:
            app.logger.error(f"Failed to initialize database pool: {e}")
            raise
        except Exception as e:
            app.logger.error(f"An unexpected error occurred during pool initialization: {e}")
            raise

init_db_pool() # Initialize the pool when the app module is loaded

@atexit.register
def close_db_pool():
    global db_pool
    if db_pool:
        app.logger.info("Closing database connection pool.")
        db_pool.closeall()
        db_pool = None

# --- JWT Configuration ---
# Tokens are issued by the identity provider; we only verify them with the shared secret.
app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY')
app.config['JWT_AUDIENCE'] = os.getenv('JWT_AUDIENCE') # e.g. "authenticated"; unset disables the aud check

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = app.logger


# --- Database Connection Helper ---
def get_db_connection():
    """Gets a connection from the database pool."""
    global db_pool
    if db_pool is None:
        logger.error("Database pool is not initialized. Attempting to re-initialize.")
        init_db_pool()
        if db_pool is None:
             logger.critical("Failed to re-initialize database pool. Cannot get connection.")
             raise psycopg2.pool.PoolError("Database pool not available.")
    try:
        return db_pool.getconn()
    except psycopg2.pool.PoolError as e:
        logger.error(f"Failed to get connection from pool: {e}")
        raise

def release_db_connection(conn):
    """Releases a connection back to the database pool."""
    global db_pool
    if db_pool and conn:
        try:
            db_pool.putconn(conn)
        except psycopg2.pool.PoolError as e:
            logger.error(f"Error releasing connection back to pool: {e}")
        except Exception as e:
            logger.error(f"Unexpected error releasing connection: {e}")


def decode_access_token(token):
    """Decodes a bearer token and returns its payload. Raises jwt.InvalidTokenError subclasses."""
    audience = app.config.get('JWT_AUDIENCE')
    if audience:
        return jwt.decode(token, app.config['JWT_SECRET_KEY'], algorithms=["HS256"], audience=audience)
    return jwt.decode(
        token,
        app.config['JWT_SECRET_KEY'],
        algorithms=["HS256"],
        options={"verify_aud": False},
    )


# --- JWT Required Decorator ---
def jwt_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = None
        if 'Authorization' in request.headers:
            auth_header = request.headers['Authorization']
            parts = auth_header.split()
            if len(parts) == 2 and parts[0].lower() == 'bearer':
                token = parts[1]
            elif len(parts) == 1: # Handle cases where 'Bearer' prefix might be missing by mistake
                token = parts[0]

        if not token:
            logger.warning("JWT token is missing")
            return jsonify(message="Authentication token is missing!"), 401

        try:
            data = decode_access_token(token)
            g.decoded_token_data = data

            # The identity provider puts the user id in 'sub'; tokens minted internally use 'user_id'
            user_id = data.get('sub') or data.get('user_id')
            if not user_id:
                logger.error("No user id claim in JWT data after decoding.")
                return jsonify(message="Invalid token: missing user id"), 401

            g.current_user_id = str(user_id)

        except jwt.ExpiredSignatureError:
            logger.warning("JWT token has expired")
            return jsonify(message="Your token has expired. Please log in again."), 401
        except jwt.InvalidTokenError as e:
            logger.error(f"Invalid JWT token: {e}")
            return jsonify(message="Invalid token. Please log in again."), 401

        return f(*args, **kwargs)
    return decorated_function


def owns_user_path(user_id):
    """True when the authenticated user matches the <user_id> in the route."""
    return str(user_id) == g.current_user_id


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic exception handler."""
    if isinstance(e, HTTPException): # 404, 405, 429 etc. keep their own status
        return e
    app.logger.error(f"Unhandled exception: {e}", exc_info=True)
    if isinstance(e, psycopg2.pool.PoolError):
        return jsonify(error="Database pool error"), 503
    if isinstance(e, psycopg2.OperationalError):
        return jsonify(error="Database connection error"), 503
    return jsonify(error="An internal server error occurred"), 500


# Import blueprints after pool initialization and app context is more stable
from .blueprints.fatigue import fatigue_bp  # noqa: E402
from .blueprints.recommendations import recommendations_bp  # noqa: E402
from .blueprints.nutrition import nutrition_bp  # noqa: E402
from .blueprints.system import system_bp  # noqa: E402

app.register_blueprint(fatigue_bp)
app.register_blueprint(recommendations_bp)
app.register_blueprint(nutrition_bp)
app.register_blueprint(system_bp)
