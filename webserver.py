"""
webserver.py — Render-compatible Webhook Server
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
Runs the Telegram bot in webhook mode when MODE=webhook (Render/production).
Falls back to polling when MODE=polling (local development).

Features:
  • aiohttp web server — handles Telegram webhook POSTs
  • / and /health      — liveness for Render / uptime monitors
  • Auto-registers webhook URL with Telegram on startup
  • Graceful shutdown with proper cleanup
"""

import sys
import logging
import asyncio
from aiohttp import web
from telegram import Update
from telegram.ext import Application

import config as cfg
from bot import build_web_app, web_server
from main import build_application, check_config, setup_logging

logger = logging.getLogger(__name__)


def build_webhook_app(ptb_app: Application) -> web.Application:
    """Liveness routes plus POST {WEBHOOK_PATH} feeding python-telegram-bot."""

    async def handle_webhook(request: web.Request) -> web.Response:
        """Receive Telegram update and pass to PTB."""
        try:
            data = await request.json()
        except ValueError:
            logger.warning("Webhook received a non-JSON body")
            return web.Response(status=400, text="bad request")
        try:
            update = Update.de_json(data, ptb_app.bot)
            await ptb_app.process_update(update)
            return web.Response(status=200, text="ok")
        except Exception as e:
            logger.error(f"Webhook handler error: {e}", exc_info=True)
            return web.Response(status=500, text="error")

    aio_app = build_web_app()
    aio_app.router.add_post(cfg.WEBHOOK_PATH, handle_webhook)

    # ── Startup: init PTB, register webhook ───────────────────────────────────
    async def on_startup(app):
        await ptb_app.initialize()
        await ptb_app.start()

        await ptb_app.bot.set_webhook(
            url=cfg.WEBHOOK_URL,
            allowed_updates=["message", "edited_message", "callback_query"],
            drop_pending_updates=True,
        )
        info = await ptb_app.bot.get_webhook_info()
        logger.info(f"✅ Webhook registered: {info.url}")
        logger.info(f"   Pending updates  : {info.pending_update_count}")

    # ── Shutdown: deregister webhook, stop PTB ────────────────────────────────
    async def on_shutdown(app):
        logger.info("⏹  Shutting down...")
        await ptb_app.bot.delete_webhook()
        await ptb_app.stop()
        await ptb_app.shutdown()
        logger.info("✅ Shutdown complete.")

    aio_app.on_startup.append(on_startup)
    aio_app.on_shutdown.append(on_shutdown)
    return aio_app


async def run_webhook():
    check_config()
    if not cfg.WEBHOOK_URL:
        logger.critical(
            "WEBHOOK_URL could not be determined. "
            "Set RENDER_EXTERNAL_URL or WEBHOOK_URL env var."
        )
        sys.exit(1)

    logger.info("🌐 Starting in WEBHOOK mode")
    logger.info(f"   Webhook URL : {cfg.WEBHOOK_URL}")
    logger.info(f"   Listen port : {cfg.PORT}")

    runner = await web_server(build_webhook_app(build_application()))

    # Keep alive until cancelled
    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await runner.cleanup()


# ─────────────────────────────────────────────────────────────────────────────
# Entrypoint
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    setup_logging()
    logger.info(f"🤖 ReelSaver Bot starting | MODE={cfg.MODE.upper()}")

    if cfg.MODE == "polling":
        import main as m
        m.main()
    else:
        try:
            asyncio.run(run_webhook())
        except KeyboardInterrupt:
            logger.info("Stopped by user.")
