"""
Keyboard / InlineKeyboard Builder helpers
"""

import secrets
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from typing import List, Optional, Tuple

CATEGORY_PREFIX = "cat_"
ADD_CATEGORY    = "add_category"
CANCEL          = "cancel"

# Matches every payload the reel form produces.
CALLBACK_PATTERN = rf"^({CATEGORY_PREFIX}[0-9a-f]+_\d+|{ADD_CATEGORY}|{CANCEL})$"


def new_menu_id() -> str:
    """Token tying category buttons to the list they were built from."""
    return secrets.token_hex(4)


def category_callback(menu_id: str, index: int) -> str:
    return f"{CATEGORY_PREFIX}{menu_id}_{index}"


def parse_category_callback(data: str) -> Optional[Tuple[str, int]]:
    """cat_1a2b3c4d_3 → ("1a2b3c4d", 3); anything else → None."""
    if not data.startswith(CATEGORY_PREFIX):
        return None
    menu_id, _, raw = data[len(CATEGORY_PREFIX):].partition("_")
    if not menu_id or not raw.isdigit():
        return None
    return menu_id, int(raw)


def categories_kb(categories: List[str], menu_id: str) -> InlineKeyboardMarkup:
    """One category per row, then Add Category and Cancel."""
    rows = [
        [InlineKeyboardButton(name, callback_data=category_callback(menu_id, i))]
        for i, name in enumerate(categories)
    ]
    rows.append([InlineKeyboardButton("➕ Add Category", callback_data=ADD_CATEGORY)])
    rows.append([InlineKeyboardButton("❌ Cancel", callback_data=CANCEL)])
    return InlineKeyboardMarkup(rows)


def cancel_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("❌ Cancel", callback_data=CANCEL)],
    ])
