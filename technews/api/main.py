import time
import logging
from contextlib import asynccontextmanager
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from technews import config
from technews.feeds.exceptions import FeedFetchError
from technews.feeds.rss import FeedFetcher, is_valid_feed
from technews.feeds.service import FeedService
from technews.sources.registry import NEWS_SOURCES
from technews.tracker.news_tracker import NewsTracker, filter_by_category

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

PROXY_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=300"  # 5 minutos

feed_service = FeedService()
tracker = NewsTracker(feed_service=feed_service)

# O proxy busca direto na origem (nunca via proxy de novo)
proxy_fetcher = FeedFetcher(use_proxy=False)

# Scheduler com configurações para evitar empilhamento de jobs
scheduler = BackgroundScheduler(
    job_defaults={
        "coalesce": True,         # junta execuções atrasadas
        "max_instances": 1,       # não roda dois iguais ao mesmo tempo
        "misfire_grace_time": 30, # 30s de tolerância
    }
)


def warm_cache():
    articles = tracker.force_refresh()
    logger.info("Cache warm-up finished: %d articles", len(articles))
    return {"status": "success", "count": len(articles)}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.SCHEDULER_ENABLED:
        scheduler.add_job(warm_cache, "interval", minutes=config.REFRESH_INTERVAL_MINUTES, id="refresh_news")
        scheduler.start()

        # Primeira execução imediata para aquecer o cache
        try:
            warm_cache()
        except Exception as e:
            logger.warning("First cache warm-up failed: %s", e)

    yield
    if config.SCHEDULER_ENABLED:
        scheduler.shutdown(wait=False)


#%% APP

app = FastAPI(title="technews", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=512)


@app.get("/health")
def health():
    return {"status": "ok", "ts": int(time.time())}


@app.get("/api/news")
def get_news(category: Optional[str] = None):
    try:
        articles = tracker.fetch_news()
    except Exception:
        logger.exception("API Error")
        return JSONResponse({"error": "Failed to fetch news"}, status_code=500)
    articles = filter_by_category(articles, category)
    return {"articles": [a.model_dump(by_alias=True) for a in articles]}


@app.get("/api/proxy")
def proxy(url: Optional[str] = None):
    """Busca o feed no servidor e devolve o texto cru (contorna CORS/bloqueios no cliente)."""
    if not url:
        return JSONResponse({"error": "URL parameter is required"}, status_code=400)

    try:
        upstream = proxy_fetcher.get_raw(url)
        text = upstream.text
        if not is_valid_feed(text):
            raise FeedFetchError("Response is not a valid RSS/XML feed")
    except FeedFetchError as e:
        logger.error("Proxy error for %s: %s", url, e)
        return JSONResponse({"error": str(e)}, status_code=500)

    return Response(
        content=text,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type") or "application/xml",
        headers={"Cache-Control": PROXY_CACHE_CONTROL},
    )


@app.get("/api/sources")
def get_sources():
    return {"sources": [s.model_dump(mode="json") for s in NEWS_SOURCES]}


@app.get("/api/feeds/stats")
def get_feed_stats():
    return {"stats": [s.model_dump() for s in feed_service.get_stats()]}


@app.get("/api/feeds/errors")
def get_feed_errors():
    return {"errors": [e.model_dump() for e in feed_service.get_errors()]}


# POST
@app.post("/api/refresh")
def refresh():
    return warm_cache()


# DELETE
@app.delete("/api/feeds/errors")
def clear_feed_errors():
    feed_service.clear_errors()
    return {"status": "success"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("technews.api.main:app", host="0.0.0.0", port=8000, reload=True)
