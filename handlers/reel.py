"""
Reel Handler — text messages, inline buttons and /cancel for the reel form.
"""

import logging
from telegram import Update
from telegram.ext import ContextTypes

from fsm.machine import ConversationMachine
from utils.helpers import allowed_chat_only, safe_answer, send_replies

logger = logging.getLogger(__name__)

EDITED_TEXT = "✏️ Edits are not picked up. Send the corrected text as a new message."


class ReelHandler:
    def __init__(self, machine: ConversationMachine):
        self.machine = machine

    @allowed_chat_only
    async def text(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat_id = update.effective_chat.id
        replies = await self.machine.handle_text(chat_id, update.effective_message.text or "")
        await send_replies(update, replies)

    @allowed_chat_only
    async def edited(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Edited messages never drive the form; say so instead of acting twice."""
        logger.debug(f"Chat {update.effective_chat.id}: ignoring edit of message "
                     f"{update.effective_message.message_id}")
        await update.effective_message.reply_text(EDITED_TEXT)

    @allowed_chat_only
    async def callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await safe_answer(query)
        replies = await self.machine.handle_button(update.effective_chat.id, query.data or "")
        await send_replies(update, replies)

    @allowed_chat_only
    async def cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        replies = await self.machine.cancel(update.effective_chat.id)
        await send_replies(update, replies)
