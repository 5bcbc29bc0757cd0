"""Environment configuration shared by the storefront components."""

import os
from dotenv import load_dotenv

# Load environment
load_dotenv(".env")

# Database connection parameters
DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "postgres")
DB_PORT = os.getenv("POSTGRES_PORT", "5432")
DB_NAME = os.getenv("POSTGRES_DB", "postgres")

# Component settings
DATA_DIR = os.getenv("DATA_DIR", "/app/data/")
REPORT_DIR = os.getenv("REPORT_DIR", "/app/reports/")
SCHEMA_DIALECT = os.getenv("SCHEMA_DIALECT", "postgresql")
SCHEMA_OUTPUT_PATH = os.getenv("SCHEMA_OUTPUT_PATH", "schema.sql")
GENERATOR_ITERATIONS = int(os.getenv("GENERATOR_ITERATIONS", "0"))


def build_db_url() -> str:
    """Database URL, `DATABASE_URL` taking precedence over the POSTGRES_* parts."""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url
    return f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


DB_URL = build_db_url()
