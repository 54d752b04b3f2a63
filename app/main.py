from fastapi import FastAPI

from api.v1.intents import router as intents_router
from app.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import EventContextMiddleware


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Intent Reconciler", version="0.1.0")
    app.add_middleware(EventContextMiddleware)
    app.include_router(intents_router, prefix="/v1")

    @app.get("/healthz")
    async def healthz():
        s = get_settings()
        return {
            "ok": True,
            "db_configured": bool(s.DATABASE_URL),
            "wallet_configured": bool(s.wallet_client_id and s.wallet_client_secret),
            "source_configured": bool(s.SOURCE_TG_ID),
        }

    return app


app = create_app()
