from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from .api import organisations, teams, users
from .api.errors import register_error_handlers
from .core.config import settings
from .database.init_database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        init_db()
    logger.info(f"{settings.PROJECT_NAME} started")
    yield

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

register_error_handlers(app)

app.include_router(users.router)
app.include_router(organisations.router)
app.include_router(teams.router)
