"""
Konfiguration - zentrale Environment-Variablen für den Edge-Router

Lädt .env.local (lokal) bzw. die System-Umgebung (Production) und stellt
alle Einstellungen als Modul-Konstanten bereit.
"""

import logging
import os
import pathlib

from dotenv import load_dotenv

# Environment Variables laden
env_path = pathlib.Path(__file__).parent.parent / ".env.local"
# Nur laden wenn Datei existiert (lokal), in Production kommen die Env-Vars vom Host
if env_path.exists():
    load_dotenv(dotenv_path=str(env_path))
else:
    load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)

# Routing
PATH_PREFIX = "/" + os.getenv("PATH_PREFIX", "/reddit").strip("/")
API_ROUTE = f"{PATH_PREFIX}/api/fetch"
STATIC_ORIGIN = os.getenv("STATIC_ORIGIN", "https://r2md.pages.dev").rstrip("/")
PASSTHROUGH_ORIGIN = os.getenv("PASSTHROUGH_ORIGIN", "https://peirce.net").rstrip("/")
# Öffentliche Basis-URL für og:url (leer = aus dem Request ableiten)
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "https://peirce.net").rstrip("/")

# Upstream (Reddit)
ALLOWED_HOSTS = frozenset({"www.reddit.com", "old.reddit.com"})
UPSTREAM_USER_AGENT = os.getenv("UPSTREAM_USER_AGENT", "r2md/1.0 (+https://peirce.net/reddit)")
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "10.0"))  # 10 Sekunden
MAX_RESPONSE_BYTES = int(os.getenv("MAX_RESPONSE_BYTES", str(5 * 1024 * 1024)))  # 5 MB

# Cache
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "60"))
CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory").lower()
CACHE_DB_PATH = os.getenv("CACHE_DB_PATH", "data/cache.db")
