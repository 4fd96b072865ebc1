# main.py
import logging
import os
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color
from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from config.container import breaker_policy, build_bootstrap, build_container
from config.rate_limit import close_rate_limiter, init_rate_limiter
from config.settings import settings
from core.circuit_breaker import BreakerRegistry, CallFailed
from core.drive_auth import DriveCredentialsMissing
from fastapi.responses import JSONResponse
from model.api import BreakerSnapshot, HealthResponse
from util.constants import InternalURIs
from util.logger import init_logger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger()
    print(f"{Color.GREEN}Initializing...{Color.RESET}")
    try:
        await init_rate_limiter()
    except Exception as e:
        logger.critical("startup.redis.error err=%s", e)
        raise

    breakers = BreakerRegistry(breaker_policy())
    bootstrap = build_bootstrap(breakers)
    try:
        credentials = await bootstrap.load_credentials()
    except DriveCredentialsMissing as e:
        logger.critical("startup.drive.unprovisioned %s", e)
        raise
    except CallFailed as e:
        logger.critical("startup.drive.auth_failed reason=%s err=%s", e.reason, e)
        raise

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    fastApi.state.container = build_container(credentials, breakers)
    print(f"{Color.BLUE}Server Started{Color.RESET}")

    try:
        yield
    finally:
        try:
            await close_rate_limiter()
        except Exception as e:
            logger.error("shutdown.redis.error err=%s", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,  # Allow cookies and other credentials
    allow_methods=["GET", "POST"],  # Allowed HTTP Methods
    allow_headers=["Authorization", "Content-Type", "Accept"],  # Allowed HTTP Headers
)


@app.get(InternalURIs.HEALTH, response_model=HealthResponse)
async def healthz(request: Request) -> HealthResponse:
    container = getattr(request.app.state, "container", None)
    if container is None:
        return HealthResponse(ok=False)
    snapshots = [BreakerSnapshot(**b.snapshot()) for b in container.breakers.all()]
    return HealthResponse(
        ok=all(s.state != "open" for s in snapshots), breakers=snapshots
    )


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests. Try again later.",
        },
        headers={"Retry-After": str(settings.RATE_LIMIT_SECONDS)},
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=reload)
