# /select_start/main.py
"""
Main application module for the API.
This is the entry point that initializes the FastAPI app and includes all routes.
"""
import logging
import sys
from datetime import timedelta
from fastapi import FastAPI
from select_start import config
from select_start.api.router import router
from select_start.db import mongo
from select_start.db.snapshots import SnapshotStore
from select_start.services.aggregation import AggregationService
from select_start.services.cache import ReportCache, ReportType
from select_start.services.enrichment import GameInfoClient
from select_start.utils.helpers import isoformat_utc, utcnow

# Logging setup - direct to stdout
logging.basicConfig(
    level=logging.INFO,
    stream=sys.stdout,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    force=True  # Override any previous configuration
)

logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="Select Start Leaderboard API",
    description="API for monthly and yearly challenge leaderboards and game nominations"
)


def build_cache() -> ReportCache:
    """Report cache backed by CACHE_DIR, restored from the last snapshots on disk."""
    cache = ReportCache(
        snapshots=SnapshotStore(config.CACHE_DIR),
        thresholds={
            ReportType.MONTHLY: timedelta(minutes=config.MONTHLY_CACHE_MINUTES),
            ReportType.YEARLY: timedelta(minutes=config.YEARLY_CACHE_MINUTES),
            ReportType.NOMINATIONS: timedelta(minutes=config.NOMINATIONS_CACHE_MINUTES),
        },
    )
    restored = cache.rehydrate()
    logger.info("Cache restored from disk: " + ", ".join(
        f"{t.value}={'yes' if ok else 'no'}" for t, ok in restored.items()
    ))
    return cache


@app.on_event("startup")
async def startup_event():
    """Connect to MongoDB and build the report service when the app starts up"""
    logger.info("=== API STARTING UP ===")

    # Without MongoDB, cached reports are still served; misses return 503
    mongo_success = mongo.init_mongodb()
    logger.info(f"MongoDB: {'✓' if mongo_success else '✗'}")

    enrichment = GameInfoClient()
    if not enrichment.configured:
        logger.info("RA_USERNAME/RA_API_KEY not set - game metadata lookups disabled")

    app.state.service = AggregationService(
        cache=build_cache(),
        store=mongo.mongo_store,
        enrichment=enrichment,
    )

    logger.info("=== API READY ===")


@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections when app shuts down"""
    logger.info("=== SHUTTING DOWN API ===")
    mongo.close_mongodb()


# Health check (no auth, never touches the cache or the database)
@app.get("/api/health")
async def health():
    return {"status": "ok", "timestamp": isoformat_utc(utcnow())}


# Include all routes with api prefix
app.include_router(router, prefix="/api")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("select_start.main:app", host="0.0.0.0", port=config.PORT, reload=True)
