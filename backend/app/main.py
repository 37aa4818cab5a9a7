import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router, ws_router
from app.core import Base, engine, settings
from app.core.errors import AppError
from app.models import Alert, Reading, Sensor, Station, User  # noqa: F401
from app.services import AlertEvaluator, BroadcastChannel, ConnectionRegistry, ReadingIngest
from app.utils.logger import setup_logging

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    registry = ConnectionRegistry()
    channel = BroadcastChannel(registry)
    channel.bind_loop(asyncio.get_running_loop())

    app.state.registry = registry
    app.state.channel = channel
    app.state.ingest = ReadingIngest(AlertEvaluator(), channel)
    logger.info("Environmental monitor started (%s)", settings.environment)

    yield

    await registry.close_all()
    logger.info("Environmental monitor stopped")


app = FastAPI(
    title="Environmental Monitor API",
    version="0.1.0",
    description="Station readings, threshold alerts and live updates.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(router, prefix="/api")
app.include_router(ws_router)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Environmental monitor backend is running", "docs": "/docs"}
