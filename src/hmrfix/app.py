from contextlib import asynccontextmanager

from fastapi import FastAPI

from .adapters.browser_pool import BrowserPool
from .api.routes import router as api_router
from .telemetry import init_telemetry


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await BrowserPool.shutdown_instance()


def create_app() -> FastAPI:
    app = FastAPI(title="hmrfix API", version="0.1.0", lifespan=lifespan)
    app.include_router(api_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    init_telemetry(app)
    return app


app = create_app()
