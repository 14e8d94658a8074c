import logging

from fastapi import FastAPI
from redis import RedisError

from .config import settings
from .redis_client import redis_client
from .routers import slots, special_occasions, venues

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Fieldbook Availability API")

app.include_router(venues.router)
app.include_router(special_occasions.router)
app.include_router(slots.router)


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except RedisError:
        redis_ok = False
    return {"redis": redis_ok}
