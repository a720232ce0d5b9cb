"""
ReelSaver Bot - Main Entry Point
Instagram Reel URL → category → use case → extra link → Google Sheets
"""

import logging
import sys
from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    CallbackQueryHandler,
    ContextTypes,
    filters,
)
import config as cfg
from bot import web_server
from fetchers.sheets import SheetsClient
from fsm.machine import ConversationMachine
from fsm.state_manager import MemoryStateStore
from handlers.reel import ReelHandler
from handlers.start import StartHandler
from utils.keyboards import CALLBACK_PATTERN

logger = logging.getLogger(__name__)


def setup_logging():
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        level=getattr(logging, cfg.LOG_LEVEL, logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every getUpdates poll at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def check_config():
    if not cfg.BOT_TOKEN:
        logger.critical("BOT_TOKEN is not set. Exiting.")
        sys.exit(1)
    if not cfg.GAS_URL:
        logger.critical("GAS_URL is not set. Exiting.")
        sys.exit(1)
    if not cfg.ALLOWED_CHAT_ID:
        logger.warning("ALLOWED_CHAT_ID is not set — every chat will be refused.")


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE):
    logger.error(f"Unhandled error for update {update}: {context.error}", exc_info=context.error)


def build_application(machine: ConversationMachine = None, post_init=None, post_shutdown=None) -> Application:
    """Build and return the configured python-telegram-bot Application."""
    builder = Application.builder().token(cfg.BOT_TOKEN)
    if post_init:
        builder = builder.post_init(post_init)
    if post_shutdown:
        builder = builder.post_shutdown(post_shutdown)
    app = builder.build()

    machine = machine or ConversationMachine(MemoryStateStore(), SheetsClient())
    start_handler = StartHandler(machine)
    reel_handler = ReelHandler(machine)

    # ── Commands ───────────────────────────────────────────────────────────────
    # Edited messages are answered separately below, never re-run as commands.
    new_messages = filters.UpdateType.MESSAGE
    app.add_handler(CommandHandler("start",  start_handler.start,   filters=new_messages))
    app.add_handler(CommandHandler("help",   start_handler.help_cmd, filters=new_messages))
    app.add_handler(CommandHandler("cancel", reel_handler.cancel,   filters=new_messages))

    # ── Inline buttons (category / add / cancel) ───────────────────────────────
    app.add_handler(CallbackQueryHandler(reel_handler.callback, pattern=CALLBACK_PATTERN))

    # ── Free text for the current form step ────────────────────────────────────
    app.add_handler(MessageHandler(new_messages & filters.TEXT & ~filters.COMMAND, reel_handler.text))
    app.add_handler(MessageHandler(filters.UpdateType.EDITED_MESSAGE & filters.TEXT, reel_handler.edited))

    app.add_error_handler(on_error)
    return app


# ── Polling mode: health server lives alongside the poller ────────────────────

async def _start_health_server(application: Application):
    application.bot_data["web_runner"] = await web_server()


async def _stop_health_server(application: Application):
    runner = application.bot_data.pop("web_runner", None)
    if runner:
        await runner.cleanup()


def main():
    setup_logging()
    check_config()

    app = build_application(
        post_init=_start_health_server,
        post_shutdown=_stop_health_server,
    )
    logger.info("🚀 ReelSaver Bot is running (polling)...")
    app.run_polling(allowed_updates=Update.ALL_TYPES, drop_pending_updates=True)


if __name__ == "__main__":
    main()
