import psycopg2
import os
import sys
from urllib.parse import urlparse

# Database connection details
DATABASE_URL = os.getenv("DATABASE_URL")
DB_NAME_FALLBACK = os.getenv("POSTGRES_DB", "trainload")
DB_USER_FALLBACK = os.getenv("POSTGRES_USER", "user")
DB_PASSWORD_FALLBACK = os.getenv("POSTGRES_PASSWORD", "password")
DB_HOST_FALLBACK = os.getenv("POSTGRES_HOST", "localhost")
DB_PORT_FALLBACK = os.getenv("POSTGRES_PORT", "5432")


def get_connection_params():
    """Returns (params, description) from DATABASE_URL or the POSTGRES_* variables."""
    fallback = {
        'dbname': DB_NAME_FALLBACK,
        'user': DB_USER_FALLBACK,
        'password': DB_PASSWORD_FALLBACK,
        'host': DB_HOST_FALLBACK,
        'port': DB_PORT_FALLBACK
    }
    if DATABASE_URL:
        try:
            url = urlparse(DATABASE_URL)
            params = {
                'dbname': url.path[1:],
                'user': url.username,
                'password': url.password,
                'host': url.hostname,
                'port': url.port
            }
            return params, f"DATABASE_URL to host '{url.hostname}'"
        except Exception as e:
            print(f"Warning: Could not parse DATABASE_URL: {e}. Falling back to POSTGRES_* variables.")
    return fallback, f"POSTGRES_* variables to host '{DB_HOST_FALLBACK}'"


# Only the two tables this service touches. Users and auth live with the identity provider.
SQL_COMMANDS = """
-- Enable UUID generation
CREATE EXTENSION IF NOT EXISTS "pgcrypto";

-- Workout logs, written by the app when a session is finished
CREATE TABLE IF NOT EXISTS workout_logs (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL,
    date TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
    completed_sets JSONB NOT NULL DEFAULT '[]',
    duration NUMERIC(6,1) DEFAULT 0, -- minutes
    muscle_group_fatigue JSONB DEFAULT '{}',
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

-- One fatigue snapshot per user
CREATE TABLE IF NOT EXISTS user_fatigue (
    user_id UUID PRIMARY KEY,
    current_fatigue NUMERIC(5,2) NOT NULL DEFAULT 30
        CHECK (current_fatigue >= 0 AND current_fatigue <= 100),
    muscle_group_fatigue JSONB,
    last_updated TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
    version INTEGER NOT NULL DEFAULT 0 -- bumped on every write, guards concurrent updates
);

CREATE INDEX IF NOT EXISTS idx_workout_logs_user_date ON workout_logs(user_id, date DESC);
"""

def create_schema():
    conn_params, connection_method = get_connection_params()
    conn = None
    try:
        print(f"Attempting to connect using {connection_method}.")
        conn = psycopg2.connect(**conn_params)
        print(f"Successfully connected to database '{conn_params.get('dbname')}' on host '{conn_params.get('host')}'.")
        with conn.cursor() as cur:
            cur.execute(SQL_COMMANDS)
            print("Schema creation commands executed.")
        conn.commit()
        print("Schema created successfully (or already existed).")
    except psycopg2.OperationalError as e:
        print(f"Error connecting to the database using method '{connection_method}': {e}")
        print("Please ensure PostgreSQL is running and accessible, "
              "and that the target database exists with appropriate permissions.")
        sys.exit(1)
    except psycopg2.Error as e:
        print(f"Error during database operation (using '{connection_method}'): {e}")
        if conn:
            conn.rollback()
        sys.exit(1)
    finally:
        if conn:
            conn.close()
            print("Database connection closed.")

if __name__ == "__main__":
    print("Attempting to create/update database schema...")
    create_schema()
    print("Script finished.")
