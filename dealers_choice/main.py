"""FastAPI application factory."""
from __future__ import annotations

from fastapi import FastAPI

from dealers_choice.api.routes import router
from dealers_choice.api.websocket import ws_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="Dealer's Choice Poker",
        description="5-Card Draw, 7-Card Stud and Texas Hold'em with wild cards and AI bots",
        version="1.0.0",
    )
    app.include_router(router)
    app.include_router(ws_router)
    return app


app = create_app()
