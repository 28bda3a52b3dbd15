import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from pingtopass.api.api import api_router
from pingtopass.core.config import settings
from pingtopass.core.errors import register_exception_handlers
from pingtopass.core.logging_config import register_request_logging, setup_logging
from pingtopass.core.rate_limit import limiter
from pingtopass.db.base_class import Base
from pingtopass.db.database import engine
import pingtopass.models  # noqa: F401  registers every table on Base

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Check production configuration and make sure the tables exist before
    serving requests.
    """
    settings.validate_production()
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started (%s)", settings.PROJECT_NAME, settings.APP_VERSION, settings.APP_ENV)
    yield
    logger.info("%s shutting down", settings.PROJECT_NAME)


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.APP_VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)
register_request_logging(app)

app.include_router(api_router, prefix=settings.API_PREFIX)


if __name__ == '__main__':
    uvicorn.run(
        'pingtopass.main:app',
        host='0.0.0.0',
        port=settings.BACKEND_PORT,
        reload=settings.APP_ENV == "development"
    )
