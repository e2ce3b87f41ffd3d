from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay.api.middleware.request_id import RequestIdMiddleware
from chat_relay.api.v1.routers import health, ws
from chat_relay.application.policies.responder_rules import load_rules
from chat_relay.config import Settings, settings
from chat_relay.infrastructure.ws.manager import ConnectionManager
from chat_relay.services.relay_service import BroadcastRelay
from chat_relay.services.responder_service import ResponderPolicy

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    cfg: Settings = app.state.settings
    manager = ConnectionManager()
    responder = ResponderPolicy(load_rules(cfg.RESPONDER_RULES_FILE))
    relay = BroadcastRelay(
        manager,
        responder,
        bot_name=cfg.BOT_NAME,
        welcome_text=cfg.WELCOME_TEXT,
        welcome_delay=cfg.WELCOME_DELAY_SECONDS,
        reply_delay=cfg.reply_delay,
        cancel_replies_on_disconnect=cfg.CANCEL_REPLIES_ON_DISCONNECT,
    )
    app.state.manager = manager
    app.state.relay = relay
    logger.info(
        "Relay ready (%d reply categories, reply delay %.1f-%.1fs)",
        len(responder.rules.categories),
        *cfg.reply_delay,
    )

    yield

    await relay.shutdown(cfg.SHUTDOWN_GRACE_SECONDS)
    logger.info("Relay stopped")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    cfg = app_settings or settings
    app = FastAPI(
        title="Chat Relay",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(health.router)
    app.include_router(ws.router)

    return app
