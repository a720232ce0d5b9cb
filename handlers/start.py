"""
Start / Help Handler
"""

from telegram import Update
from telegram.ext import ContextTypes
from telegram.constants import ParseMode

from fsm.machine import ConversationMachine
from utils.helpers import allowed_chat_only, send_replies


class StartHandler:
    def __init__(self, machine: ConversationMachine):
        self.machine = machine

    @allowed_chat_only
    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        replies = await self.machine.start(update.effective_chat.id)
        await send_replies(update, replies)

    @allowed_chat_only
    async def help_cmd(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        text = (
            "📖 <b>How it works</b>\n\n"
            "1. Send an Instagram Reel URL\n"
            "2. Pick a category or tap ➕ Add Category\n"
            "3. Describe the use case\n"
            "4. Send an extra URL, or <code>no</code>\n\n"
            "The reel is saved as a row in that category's sheet.\n\n"
            "<b>Commands:</b>\n"
            "/start — Restart the form\n"
            "/cancel — Drop the current entry\n"
            "/help — This message\n\n"
            "You can also type <code>cancel</code> at any step."
        )
        await update.effective_message.reply_text(text, parse_mode=ParseMode.HTML)
