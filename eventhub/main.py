import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventhub import models  # noqa: F401  registers tables with Base.metadata
from eventhub.core.config import ALLOWED_ORIGINS
from eventhub.core.errors import DomainError, StoreUnavailable
from eventhub.core.logging_config import setup_logging
from eventhub.database.db import Base, engine
from eventhub.routes import comments, events, favorites, registrations, users

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Event Hub API", version="1.0.0")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    level = logging.WARNING if isinstance(exc, StoreUnavailable) else logging.INFO
    logger.log(level, "%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


# Include the routers
app.include_router(users.router)
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(comments.router)
app.include_router(favorites.router)


@app.get("/")
def read_root():
    return {"message": "Event Hub API", "status": "running"}
