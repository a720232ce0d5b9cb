"""
Shared helpers — access decorator + reply plumbing.
"""
import functools
import logging
from typing import Iterable, Optional

from telegram import CallbackQuery, Update
from telegram.error import TelegramError

import config as cfg

logger = logging.getLogger(__name__)

DENIED_TEXT = "⛔ You are not authorized to use this bot."


def is_allowed_chat(chat_id) -> bool:
    return str(chat_id) == cfg.ALLOWED_CHAT_ID


# ── Decorators ────────────────────────────────────────────────────────────────

def allowed_chat_only(func):
    """Answer every other chat with a fixed denial and stop there."""
    @functools.wraps(func)
    async def wrapper(self, update: Update, context, *args, **kwargs):
        chat = update.effective_chat
        if chat and not is_allowed_chat(chat.id):
            logger.warning(f"Denied update from chat {chat.id}")
            if update.callback_query:
                await safe_answer(update.callback_query)
            if update.effective_message:
                await update.effective_message.reply_text(DENIED_TEXT)
            return
        return await func(self, update, context, *args, **kwargs)
    return wrapper


# ── Misc ──────────────────────────────────────────────────────────────────────

async def safe_answer(query: CallbackQuery, text: Optional[str] = None, alert: bool = False):
    try:
        await query.answer(text, show_alert=alert)
    except TelegramError as e:
        logger.debug(f"Callback answer failed: {e}")


async def send_replies(update: Update, replies: Iterable):
    """Send machine replies into the chat the update came from."""
    message = update.effective_message
    for reply in replies:
        await message.reply_text(reply.text, reply_markup=reply.reply_markup)
