from contextlib import asynccontextmanager

from fastapi import FastAPI

from deckgate.api.deps import get_llm_client
from deckgate.api.routes import router
from deckgate.core.config import settings
from deckgate.core.logging import configure_logging
from deckgate.db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield
    await get_llm_client().aclose()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
