import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from tavern_tournaments.api.endpoints import tournaments as tournament_endpoints
from tavern_tournaments.core.config import settings
from tavern_tournaments.core.database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready (%s)", settings.DATABASE_URL)
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.include_router(tournament_endpoints.router, prefix=f"{settings.API_PREFIX}/events", tags=["Tournaments"])


@app.get("/")
async def root():
    return {"message": settings.PROJECT_NAME}


if __name__ == "__main__":
    uvicorn.run("tavern_tournaments.main:app", host="0.0.0.0", port=8000, reload=True)
