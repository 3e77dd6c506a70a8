"""FastAPI application for the Green Wallet HTTP API."""

from typing import Optional
from fastapi import FastAPI

from greenwallet import __version__
from greenwallet.api.routes import router
from greenwallet.config import Settings, configure_logging, get_settings
from greenwallet.storage import build_store
from greenwallet.wallet_service import GreenWalletService


def create_app(settings: Optional[Settings] = None,
               service: Optional[GreenWalletService] = None) -> FastAPI:
    """Build the API app.

    The storage backend is chosen from settings unless a ready service is
    passed in (tests do this to control the store and the clock).
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Green Wallet API",
        version=__version__,
        description="Green Points ledger for e-waste recycling rewards",
    )
    app.state.service = service or GreenWalletService(build_store(settings), settings)
    app.include_router(router, prefix="/v1")

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "ok",
            "version": app.version,
            "storage": app.state.service.store.get_name(),
        }

    return app


app = create_app()
