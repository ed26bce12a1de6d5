"""
Runtime configuration for HyperAttend.

Values come from the process environment, optionally seeded from a local
``.env`` file. Both the API server and the dashboard client read from here.
"""
import os
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv(override=False)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _database_name(uri: str) -> str:
    explicit = os.getenv("DATABASE_NAME")
    if explicit:
        return explicit
    path = urlparse(uri).path.lstrip("/")
    return path or "hyperattend"


# Server
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/hyperattend")
DATABASE_NAME = _database_name(MONGO_URI)
PORT = int(os.getenv("PORT", "5000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# /api/seed wipes sections and students; turn off anywhere real data lives.
ALLOW_SEED = _flag("ALLOW_SEED", "1")

# Client
API_URL = os.getenv("VITE_API_URL", "http://localhost:5000").rstrip("/")
STATE_FILE = os.getenv("HYPERATTEND_STATE_FILE") or None
