"""Configuration module for project settings and environment variables.

This module manages configuration settings and environment-specific
parameters for the Global Defense Index. Values are read from the
environment (and a local ``.env`` file) at import time; validation is
explicit and happens when the application starts.
"""

import os

from dotenv import load_dotenv

from defense_index.exceptions import ConfigurationError
from defense_index.logging_config import create_logger

load_dotenv()

logger = create_logger(__name__)

# get the local root directory
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

# Environment configurations
TARGET = os.getenv("TARGET", "dev").lower()
USERNAME = os.getenv("USERNAME", "default").lower()

# Environment prefix used for remote object keys
STORAGE_ENV = TARGET if TARGET == "prod" else f"dev/{TARGET}_{USERNAME}"

SUPPORTED_BACKENDS = ("memory", "duckdb", "s3")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "duckdb").lower()

# Well-known path of the shared document
DOCUMENT_PATH = os.getenv("DOCUMENT_PATH", "system/global_data")

DATA_DIR = os.path.join(ROOT_DIR, "data")
DUCKDB_PATH = os.getenv("DUCKDB_PATH", os.path.join(DATA_DIR, "defense_index.duckdb"))

S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME", "global-defense-index")
S3_DOCUMENT_KEY = f"{STORAGE_ENV}/{DOCUMENT_PATH}.json"

POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "2.0"))

# Generative model settings
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_API_KEY = os.getenv("LLM_API_KEY", "")
LLM_BASE_URL = os.getenv("LLM_BASE_URL") or None


def validate_config():
    """
    Validate critical configuration parameters.
    Raises ConfigurationError if any required config is missing or invalid.

    :raises ConfigurationError: If configuration is invalid
    """
    if STORAGE_BACKEND not in SUPPORTED_BACKENDS:
        raise ConfigurationError(
            f"Unsupported STORAGE_BACKEND '{STORAGE_BACKEND}', "
            f"expected one of: {', '.join(SUPPORTED_BACKENDS)}"
        )

    if not DOCUMENT_PATH:
        raise ConfigurationError("Document path (DOCUMENT_PATH) is not configured")

    if STORAGE_BACKEND == "duckdb":
        if not DUCKDB_PATH:
            raise ConfigurationError("Database path (DUCKDB_PATH) is not configured")
        try:
            db_dir = os.path.dirname(DUCKDB_PATH)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Unable to create database directory for {DUCKDB_PATH}: {e}"
            )

    if STORAGE_BACKEND == "s3" and not S3_BUCKET_NAME:
        raise ConfigurationError(
            "S3 storage is selected but no bucket name is specified"
        )

    if POLL_INTERVAL_SECONDS <= 0:
        raise ConfigurationError("POLL_INTERVAL_SECONDS must be positive")

    if not TARGET:
        raise ConfigurationError("TARGET environment is not set")

    if not LLM_API_KEY:
        logger.warning("LLM_API_KEY is not set, entity generation is disabled")

    logger.info("Configuration validation successful")
