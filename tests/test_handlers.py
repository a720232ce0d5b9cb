"""
Test cases for the Telegram side: access gate, reply plumbing, app wiring
"""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram import Chat, Message, Update
from telegram.ext import CallbackQueryHandler, CommandHandler, MessageHandler

import config as cfg
from fsm.states import Step
from handlers.reel import EDITED_TEXT, ReelHandler
from handlers.start import StartHandler
from utils.helpers import DENIED_TEXT, allowed_chat_only, is_allowed_chat
from utils.keyboards import CALLBACK_PATTERN, category_callback, parse_category_callback

ALLOWED = 4242


def make_update(chat_id, text=None, data=None):
    update = MagicMock()
    update.effective_chat.id = chat_id
    update.effective_message.reply_text = AsyncMock()
    update.message.text = text
    update.effective_message.text = text
    if data is None:
        update.callback_query = None
    else:
        update.callback_query.data = data
        update.callback_query.answer = AsyncMock()
    return update


def sent_texts(update):
    return [c.args[0] for c in update.effective_message.reply_text.await_args_list]


def test_is_allowed_chat_compares_as_text():
    assert is_allowed_chat(ALLOWED)
    assert is_allowed_chat(str(ALLOWED))
    assert not is_allowed_chat(ALLOWED + 1)


def test_empty_allowed_chat_refuses_everyone(monkeypatch):
    monkeypatch.setattr(cfg, "ALLOWED_CHAT_ID", "")
    assert not is_allowed_chat(ALLOWED)


@pytest.mark.parametrize("call", [
    lambda m, u: ReelHandler(m).text(u, None),
    lambda m, u: ReelHandler(m).edited(u, None),
    lambda m, u: ReelHandler(m).callback(u, None),
    lambda m, u: ReelHandler(m).cancel(u, None),
    lambda m, u: StartHandler(m).start(u, None),
    lambda m, u: StartHandler(m).help_cmd(u, None),
])
async def test_other_chats_only_get_denial(machine, store, storage, call):
    update = make_update(999, text="http://x", data="add_category")
    await call(machine, update)

    assert sent_texts(update) == [DENIED_TEXT]
    assert 999 not in store
    storage.get_categories.assert_not_called()


async def test_denied_callback_is_still_answered(machine):
    update = make_update(999, data="cancel")
    await ReelHandler(machine).callback(update, None)
    update.callback_query.answer.assert_awaited()


async def test_update_without_chat_passes_through():
    class Gated:
        @allowed_chat_only
        async def handle(self, update, context):
            return "handled"

    update = make_update(ALLOWED)
    update.effective_chat = None
    assert await Gated().handle(update, None) == "handled"
    update.effective_message.reply_text.assert_not_called()


async def test_start_command(machine, store):
    update = make_update(ALLOWED)
    await StartHandler(machine).start(update, None)
    assert (await store.get(ALLOWED)).step is Step.WAITING_REEL
    assert "Reel URL" in sent_texts(update)[0]


async def test_text_reaches_machine_and_sends_keyboard(machine, store):
    update = make_update(ALLOWED, text="http://x")
    await ReelHandler(machine).text(update, None)

    assert (await store.get(ALLOWED)).step is Step.WAITING_CATEGORY
    call = update.effective_message.reply_text.await_args
    assert call.args[0] == "📂 Choose a category:"
    assert call.kwargs["reply_markup"] is not None


async def test_callback_is_answered_and_routed(machine, store):
    await ReelHandler(machine).text(make_update(ALLOWED, text="http://x"), None)

    menu_id = (await store.get(ALLOWED)).menu_id
    update = make_update(ALLOWED, data=category_callback(menu_id, 1))
    await ReelHandler(machine).callback(update, None)

    update.callback_query.answer.assert_awaited()
    assert (await store.get(ALLOWED)).category == "Bar"


async def test_cancel_command(machine, store):
    await machine.start(ALLOWED)
    update = make_update(ALLOWED)
    await ReelHandler(machine).cancel(update, None)
    assert ALLOWED not in store
    assert sent_texts(update) == ["❌ Cancelled."]


@pytest.mark.parametrize("data, expected", [
    ("cat_1a2b_0", ("1a2b", 0)),
    ("cat_1a2b_12", ("1a2b", 12)),
    ("cat_0", None),
    ("cat_1a2b_Foo", None),
    ("cat_", None),
    ("add_category", None),
])
def test_parse_category_callback(data, expected):
    assert parse_category_callback(data) == expected


def test_build_application_registers_handlers(machine, monkeypatch):
    monkeypatch.setattr(cfg, "BOT_TOKEN", "123456:TEST-token")
    from main import build_application

    app = build_application(machine)
    registered = app.handlers[0]
    commands = set()
    for h in registered:
        if isinstance(h, CommandHandler):
            commands |= set(h.commands)
    assert commands == {"start", "help", "cancel"}
    assert any(isinstance(h, MessageHandler) for h in registered)
    callbacks = [h for h in registered if isinstance(h, CallbackQueryHandler)]
    assert len(callbacks) == 1
    assert callbacks[0].pattern.pattern == CALLBACK_PATTERN


def make_message(text):
    """A real Telegram message whose replies go to a mocked bot."""
    bot = AsyncMock()
    bot.defaults = None
    message = Message(
        message_id=7,
        date=datetime.now(timezone.utc),
        chat=Chat(ALLOWED, Chat.PRIVATE),
        text=text,
    )
    message.set_bot(bot)
    return message, bot


def routed(app, update):
    return [h for h in app.handlers[0] if h.check_update(update)]


async def test_edited_message_gets_guidance(machine, store, monkeypatch):
    monkeypatch.setattr(cfg, "BOT_TOKEN", "123456:TEST-token")
    from main import build_application

    app = build_application(machine)
    message, bot = make_message("http://x")
    update = Update(5, edited_message=message)

    handlers = routed(app, update)
    assert [h.callback.__name__ for h in handlers] == ["edited"]
    await handlers[0].callback(update, None)

    bot.send_message.assert_awaited_once()
    assert bot.send_message.await_args.kwargs["text"] == EDITED_TEXT
    assert ALLOWED not in store


async def test_new_message_drives_the_form(machine, store, monkeypatch):
    monkeypatch.setattr(cfg, "BOT_TOKEN", "123456:TEST-token")
    from main import build_application

    app = build_application(machine)
    message, bot = make_message("http://x")
    update = Update(6, message=message)

    handlers = routed(app, update)
    assert [h.callback.__name__ for h in handlers] == ["text"]
    await handlers[0].callback(update, None)

    assert (await store.get(ALLOWED)).step is Step.WAITING_CATEGORY
    assert bot.send_message.await_args.kwargs["text"] == "📂 Choose a category:"
