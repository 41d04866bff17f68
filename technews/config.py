import os
from dotenv import load_dotenv

# Carrega variáveis do .env (o ambiente do processo tem prioridade)
load_dotenv(override=False)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


NEWS_ENV = os.getenv("NEWS_ENV", "development").lower()

# Proxy só em produção, a menos que NEWS_USE_PROXY diga o contrário
USE_PROXY = _env_bool("NEWS_USE_PROXY", NEWS_ENV == "production")

CACHE_TTL_MINUTES = _env_int("NEWS_CACHE_TTL_MINUTES", 15)
FETCH_TIMEOUT = _env_int("NEWS_FETCH_TIMEOUT", 15)          # segundos por tentativa
MAX_RETRIES = _env_int("NEWS_MAX_RETRIES", 3)
MAX_FETCH_WORKERS = _env_int("NEWS_MAX_FETCH_WORKERS", 8)
MAX_ERRORS = 100

REFRESH_INTERVAL_MINUTES = _env_int("NEWS_REFRESH_INTERVAL_MINUTES", 15)
SCHEDULER_ENABLED = _env_bool("NEWS_SCHEDULER_ENABLED", True)

LOG_LEVEL = os.getenv("NEWS_LOG_LEVEL", "INFO").upper()

DEFAULT_PUBLIC_URL = "http://localhost:8000"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
ACCEPT = "application/rss+xml, application/xml, application/atom+xml, text/xml, */*"


def public_base_url() -> str:
    """Base URL do próprio serviço, usada para montar a URL do /api/proxy."""
    vercel = os.getenv("NEWS_VERCEL_URL")
    if vercel:
        return f"https://{vercel}"
    return os.getenv("NEWS_PUBLIC_URL") or DEFAULT_PUBLIC_URL
