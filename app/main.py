"""FastAPI entry point for the Webex command bot."""
import asyncio
import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.logging_config import setup_logging
from app.webex_client import WebexApiClient
from app.webex_handler import WebexBotHandler
from webex_bot.commands import build_default_registry
from webex_bot.constants import DEFAULT_API_URL, DEFAULT_TIMEZONE, DEFAULT_WEBHOOK_NAME, WEBHOOK_PATH

setup_logging()
logger = logging.getLogger(__name__)

BOT_ACCESS_TOKEN = os.environ.get("BOT_ACCESS_TOKEN", "")
DOMAIN_NAME = os.environ.get("DOMAIN_NAME", "")
WEBEX_API_URL = os.environ.get("WEBEX_API_URL", DEFAULT_API_URL)
WEBHOOK_NAME = os.environ.get("WEBHOOK_NAME", DEFAULT_WEBHOOK_NAME)
BOT_TIMEZONE = os.environ.get("BOT_TIMEZONE", DEFAULT_TIMEZONE)
APP_ENV = os.environ.get("APP_ENV", "production").lower()
webex_client = None
webex_handler = None
# Serializes lazy init so concurrent first webhooks build a single client.
_init_lock = asyncio.Lock()

# Validate required environment variables early.
_required_env = ["BOT_ACCESS_TOKEN"]

_missing_env = [key for key in _required_env if not os.environ.get(key)]
if _missing_env:
    logger.error(f"Missing required environment variables: {_missing_env}")
    if APP_ENV == "production":
        raise RuntimeError("Missing required environment variables")

if BOT_ACCESS_TOKEN:
    logger.info(f"BOT_ACCESS_TOKEN found, length: {len(BOT_ACCESS_TOKEN)}")
else:
    logger.warning("BOT_ACCESS_TOKEN not set - Webex integration disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    await init_webex()
    yield
    # Shutdown logic
    if webex_client:
        await webex_client.close()


app = FastAPI(lifespan=lifespan)


async def init_webex():
    """Create the API client and dispatcher, then register the webhook."""
    async with _init_lock:
        if not BOT_ACCESS_TOKEN or webex_handler is not None:
            return
        await _create_webex()


async def _create_webex():
    global webex_client, webex_handler
    logger.info("Initializing Webex bot...")
    webex_client = WebexApiClient(BOT_ACCESS_TOKEN, api_url=WEBEX_API_URL)
    registry = build_default_registry(timezone=BOT_TIMEZONE)
    webex_handler = WebexBotHandler(client=webex_client, registry=registry)
    await webex_handler.initialize()
    logger.info(f"{len(registry)} commands registered")

    if DOMAIN_NAME:
        webhook_url = f"https://{DOMAIN_NAME}{WEBHOOK_PATH}"
        try:
            await webex_client.register_webhook(WEBHOOK_NAME, webhook_url)
        except Exception as e:
            logger.error(f"Failed to register Webex webhook {webhook_url}: {e}")
    else:
        logger.warning("DOMAIN_NAME not set - webhook registration skipped")


@app.post(WEBHOOK_PATH)
async def webex_webhook(request: Request):
    """Webhook endpoint for Webex message events.

    Endpoint: POST /webex-bot/webhook
    """
    # Lazy initialization on first webhook call
    if webex_handler is None and BOT_ACCESS_TOKEN:
        await init_webex()

    if not webex_handler:
        raise HTTPException(status_code=503, detail="Webex bot not configured")

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        return {"status": "error", "message": "Invalid webhook data"}

    logger.info(f"Webhook request received: {payload.get('id') if isinstance(payload, dict) else None}")
    return await webex_handler.process_webhook(payload)


@app.get("/webex-bot/status")
async def webex_status():
    """Report whether the bot is configured and who it is."""
    if not webex_handler:
        return {
            "status": "disabled",
            "message": "Webex bot not configured",
            "token_present": bool(BOT_ACCESS_TOKEN),
        }

    identity = webex_handler.identity
    if identity.email is None:
        return {"status": "error", "message": "Bot identity not loaded"}

    return {
        "status": "active",
        "bot_email": identity.email,
        "bot_name": identity.display_name,
        "commands": len(webex_handler.registry),
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/healthz")
async def healthz():
    """Basic health check."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 3000)))
