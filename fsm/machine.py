"""
Reel Form Machine — reel URL → category → use case → extra link → spreadsheet.

Transport-free: every operation takes a chat id plus the inbound payload and
returns the replies to send. The Telegram handlers only translate updates.
"""

import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from telegram import InlineKeyboardMarkup

from fetchers.sheets import (
    SheetsClient, StorageError, StorageMalformed, StorageRejected, StorageTimeout,
)
from fsm.state_manager import StateStore
from fsm.states import ConversationRecord, Step
from utils.keyboards import (
    ADD_CATEGORY, CANCEL, cancel_kb, categories_kb, new_menu_id, parse_category_callback,
)

logger = logging.getLogger(__name__)

URL_RE = re.compile(r"^https?://\S", re.IGNORECASE)


@dataclass
class Reply:
    text: str
    reply_markup: Optional[InlineKeyboardMarkup] = None


def describe_failure(error: StorageError) -> str:
    """Short user-facing reason for a storage failure."""
    if isinstance(error, StorageTimeout):
        return "the spreadsheet did not answer in time"
    if isinstance(error, StorageRejected):
        return "the spreadsheet rejected the request"
    if isinstance(error, StorageMalformed):
        return "the spreadsheet sent back an unreadable answer"
    return "the spreadsheet could not be reached"


class ConversationMachine:
    def __init__(self, store: StateStore, storage: SheetsClient):
        self.store = store
        self.storage = storage
        self._on_text: Dict[Step, Callable[[int, ConversationRecord, str], Awaitable[List[Reply]]]] = {
            Step.WAITING_REEL:     self._text_waiting_reel,
            Step.WAITING_CATEGORY: self._text_waiting_category,
            Step.ADDING_CATEGORY:  self._text_adding_category,
            Step.WAITING_USE_CASE: self._text_waiting_use_case,
            Step.WAITING_EXTRA:    self._text_waiting_extra,
        }
        missing = set(Step) - set(self._on_text)
        if missing:
            raise RuntimeError(f"No text handler for steps: {sorted(s.value for s in missing)}")

    # ── Entry points ───────────────────────────────────────────────────────────

    async def start(self, chat_id: int) -> List[Reply]:
        await self.store.set(chat_id, ConversationRecord())
        return [Reply("👋 Send me an Instagram Reel URL to start.")]

    async def cancel(self, chat_id: int) -> List[Reply]:
        await self.store.delete(chat_id)
        logger.info(f"Chat {chat_id} cancelled the form")
        return [Reply("❌ Cancelled.")]

    async def handle_text(self, chat_id: int, text: str) -> List[Reply]:
        if text.strip().lower() == "cancel":
            return await self.cancel(chat_id)
        record = await self._load(chat_id)
        return await self._on_text[record.step](chat_id, record, text)

    async def handle_button(self, chat_id: int, data: str) -> List[Reply]:
        if data == CANCEL:
            return await self.cancel(chat_id)

        record = await self._load(chat_id)
        if record.step is not Step.WAITING_CATEGORY:
            logger.debug(f"Chat {chat_id}: stale button {data!r} on step {record.step.value}")
            return [self._prompt_for(record)]

        if data == ADD_CATEGORY:
            record.step = Step.ADDING_CATEGORY
            await self.store.set(chat_id, record)
            return [Reply("➕ Send the new category name:", cancel_kb())]

        parsed = parse_category_callback(data)
        menu_id, index = parsed if parsed else ("", -1)
        # Buttons from an older keyboard carry another menu id.
        if menu_id != record.menu_id or not 0 <= index < len(record.categories):
            logger.debug(f"Chat {chat_id}: stale category button {data!r}")
            return [Reply(
                "⚠️ That category is no longer available. Choose again:",
                categories_kb(record.categories, record.menu_id),
            )]

        record.category = record.categories[index]
        record.step = Step.WAITING_USE_CASE
        await self.store.set(chat_id, record)
        return [Reply(f"📂 Category: {record.category}\n✏️ Enter a use case:", cancel_kb())]

    # ── Per-step text handlers ─────────────────────────────────────────────────

    async def _text_waiting_reel(self, chat_id: int, record: ConversationRecord, text: str) -> List[Reply]:
        url = text.strip()
        if not URL_RE.match(url):
            return [Reply("⚠️ Send a valid Instagram Reel URL.")]

        try:
            categories = await self.storage.get_categories()
        except StorageError as e:
            logger.warning(f"Chat {chat_id}: category fetch failed: {e}")
            return [Reply(f"⚠️ Failed to fetch categories ({describe_failure(e)}). "
                          f"Send the URL again to retry.")]

        record.media_url = url
        record.categories = categories
        record.menu_id = new_menu_id()
        record.step = Step.WAITING_CATEGORY
        await self.store.set(chat_id, record)
        return [Reply("📂 Choose a category:", categories_kb(categories, record.menu_id))]

    async def _text_waiting_category(self, chat_id: int, record: ConversationRecord, text: str) -> List[Reply]:
        return [Reply(
            "👆 Pick a category with the buttons, or tap ➕ Add Category.",
            categories_kb(record.categories, record.menu_id),
        )]

    async def _text_adding_category(self, chat_id: int, record: ConversationRecord, text: str) -> List[Reply]:
        name = text.strip()
        if not name:
            return [Reply("⚠️ Please send a valid category name.", cancel_kb())]

        try:
            await self.storage.add_category(name)
        except StorageError as e:
            logger.warning(f"Chat {chat_id}: creating category {name!r} failed: {e}")
            return [Reply(f"⚠️ Failed to create category ({describe_failure(e)}). Try again.", cancel_kb())]

        record.category = name
        record.step = Step.WAITING_USE_CASE
        await self.store.set(chat_id, record)
        logger.info(f"Chat {chat_id} created category {name!r}")
        return [Reply(f"✅ Category '{name}' created. Now send the Use Case:", cancel_kb())]

    async def _text_waiting_use_case(self, chat_id: int, record: ConversationRecord, text: str) -> List[Reply]:
        record.use_case = text.strip()
        record.step = Step.WAITING_EXTRA
        await self.store.set(chat_id, record)
        return [Reply("🔗 Send Extra URL (or type 'no'):", cancel_kb())]

    async def _text_waiting_extra(self, chat_id: int, record: ConversationRecord, text: str) -> List[Reply]:
        extra = text.strip()
        record.extra_link = "" if extra.lower() == "no" else extra
        await self.store.set(chat_id, record)

        try:
            await self.storage.save_reel(
                category=record.category,
                reel_url=record.media_url,
                use_case=record.use_case,
                extra_link=record.extra_link,
            )
        except StorageError as e:
            # Keep everything so a resend retries the save.
            logger.error(f"Chat {chat_id}: saving reel {record.media_url} failed: {e}")
            return [Reply(
                f"⚠️ Failed to save reel ({describe_failure(e)}). Your answers are kept: "
                f"send the extra URL (or 'no') again to retry, or type cancel.",
                cancel_kb(),
            )]

        logger.info(f"Chat {chat_id} saved {record.media_url} in {record.category!r}")
        await self.store.set(chat_id, ConversationRecord())
        return [
            Reply(f"✅ Reel saved in '{record.category}' sheet!"),
            Reply("🎬 Send another Reel URL to continue or type /start to restart."),
        ]

    # ── Helpers ────────────────────────────────────────────────────────────────

    async def _load(self, chat_id: int) -> ConversationRecord:
        record = await self.store.get(chat_id)
        if record is None:
            record = ConversationRecord()
            await self.store.set(chat_id, record)
        return record

    def _prompt_for(self, record: ConversationRecord) -> Reply:
        """Re-ask whatever the current step is waiting for."""
        if record.step is Step.WAITING_REEL:
            return Reply("🎬 Send me an Instagram Reel URL to start.")
        if record.step is Step.WAITING_CATEGORY:
            return Reply("📂 Choose a category:", categories_kb(record.categories, record.menu_id))
        if record.step is Step.ADDING_CATEGORY:
            return Reply("➕ Send the new category name:", cancel_kb())
        if record.step is Step.WAITING_USE_CASE:
            return Reply("✏️ Enter a use case:", cancel_kb())
        return Reply("🔗 Send Extra URL (or type 'no'):", cancel_kb())
