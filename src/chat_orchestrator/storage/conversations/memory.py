"""
In-memory conversation cache.

Keeps the most recent turns per owner in a bounded deque. Data is lost on
restart.
"""

import logging
from collections import deque
from typing import Dict, List

from chat_orchestrator.models import ConversationTurn

logger = logging.getLogger(__name__)


class InMemoryConversationStore:
    """In-memory implementation of the ConversationStore protocol."""

    def __init__(self, max_turns: int = 20):
        """
        Initialize the store.

        Args:
            max_turns: Maximum number of turns kept per owner (default: 20)
        """
        self._turns: Dict[str, deque] = {}
        self._max_turns = max_turns

        logger.info(f"InMemoryConversationStore initialized (max_turns={max_turns})")

    def add_turns(self, owner_id: str, turns: List[ConversationTurn]) -> int:
        if owner_id not in self._turns:
            self._turns[owner_id] = deque(maxlen=self._max_turns)

        queue = self._turns[owner_id]
        queue.extend(turns)

        logger.debug(f"Added {len(turns)} turns for owner {owner_id} (total: {len(queue)})")

        return len(turns)

    def get_recent_turns(self, owner_id: str, limit: int = 20) -> List[ConversationTurn]:
        if owner_id not in self._turns or limit <= 0:
            return []

        return list(self._turns[owner_id])[-limit:]

    def clear(self, owner_id: str) -> int:
        if owner_id not in self._turns:
            return 0

        count = len(self._turns[owner_id])
        del self._turns[owner_id]

        logger.info(f"Cleared {count} turns for owner {owner_id}")

        return count
