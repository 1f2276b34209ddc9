import logging

from fastapi import FastAPI

from taskdeck.config import settings
from taskdeck.errors import install_error_handlers
from taskdeck.logging_setup import setup_logging
from taskdeck.routes import auth, health, subscriptions, tasks, users, webhooks

logger = logging.getLogger(__name__)

ROUTERS = (health, auth, subscriptions, tasks, users, webhooks)

def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(title="taskdeck-api", version="0.1.0")
    install_error_handlers(app)
    for module in ROUTERS:
        app.include_router(module.router)

    logger.debug("app created env=%s", settings.app_env)
    return app

app = create_app()
