"""
FSM State Manager — per-chat conversation record storage.
Memory only: records are lost when the process restarts.
"""

import logging
from typing import Dict, Optional

from fsm.states import ConversationRecord

logger = logging.getLogger(__name__)


class StateStore:
    """Narrow interface the conversation machine talks to."""

    async def get(self, chat_id: int) -> Optional[ConversationRecord]:
        raise NotImplementedError

    async def set(self, chat_id: int, record: ConversationRecord):
        raise NotImplementedError

    async def delete(self, chat_id: int):
        raise NotImplementedError


class MemoryStateStore(StateStore):
    def __init__(self):
        self._store: Dict[int, ConversationRecord] = {}

    async def get(self, chat_id: int) -> Optional[ConversationRecord]:
        return self._store.get(chat_id)

    async def set(self, chat_id: int, record: ConversationRecord):
        self._store[chat_id] = record

    async def delete(self, chat_id: int):
        if self._store.pop(chat_id, None) is not None:
            logger.debug(f"FSM: cleared state for chat {chat_id}")

    def __contains__(self, chat_id) -> bool:
        return chat_id in self._store

    def __len__(self) -> int:
        return len(self._store)
