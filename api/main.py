import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aggregator import router as aggregator_router
from aggregator.repository import Store
from aggregator.service import Resolver
from core import config, db, logs, upstream
from core.errors import AggregatorError

GENERIC_ERROR_MESSAGE = "Sorry, something went wrong."

logs.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One DB pool and one upstream HTTP client per process.
    settings = config.upstream_settings()
    database = db.Database.from_env()
    await database.connect()
    http = upstream.make_client(timeout_s=settings.timeout_s)
    app.state.resolver = Resolver(Store(database), http, settings)
    try:
        yield
    finally:
        await http.aclose()
        await database.close()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_allow_origins(),
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(aggregator_router.router, tags=["aggregator"])


@app.exception_handler(AggregatorError)
async def aggregator_error_handler(request: Request, exc: AggregatorError) -> JSONResponse:
    # Internal detail stays in the log; clients get a generic message.
    logger.error("request_failed path=%s error=%s: %s", request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=500, content={"detail": GENERIC_ERROR_MESSAGE})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "city explorer api"}
