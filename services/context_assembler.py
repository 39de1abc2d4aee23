"""Build the bounded conversation window handed to the reply generator."""

from __future__ import annotations

from typing import List

from dal.message_dal import MessageDAL
from models.chat_models import MessageRecord
from models.generation_models import ContextTurn

MAX_CONTEXT_MESSAGES = 20


def _to_context_turn(message: MessageRecord) -> ContextTurn:
	# Images are only forwarded on turns the user wrote.
	image_data = message.image_data if message.role == "user" else None
	return ContextTurn(role=message.role, content=message.content, image_data=image_data)


class ContextAssembler:
	"""Select the most recent turns of a chat in chronological order."""

	def __init__(self, messages: MessageDAL, limit: int = MAX_CONTEXT_MESSAGES) -> None:
		self.messages = messages
		self.limit = limit

	async def build(self, chat_id: str) -> List[ContextTurn]:
		"""Return at most `limit` turns, oldest first.

		Older turns beyond the window are left out of the context but stay in
		storage. An empty chat yields an empty list.
		"""
		recent = await self.messages.list_recent(chat_id, self.limit)
		recent.reverse()
		return [_to_context_turn(message) for message in recent]
