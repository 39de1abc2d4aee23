"""Persisted records for users, chats and conversation turns."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class UserRecord:
	"""In-memory representation of a row in the USERS table."""

	id: str
	email: str
	name: str
	password_hash: str
	created_at: float

	def public(self) -> Dict[str, Any]:
		"""Return the fields safe to send to clients."""
		return {"id": self.id, "email": self.email, "name": self.name}


@dataclass
class ChatRecord:
	"""In-memory representation of a row in the CHATS table.

	Attributes:
		id: Primary key (uuid4 hex).
		user_id: Owner of the chat.
		title: Trimmed title, 1-100 characters.
		created_at: Unix timestamp (seconds) when the chat was created.
		updated_at: Unix timestamp refreshed whenever a turn is appended.
		message_count: Number of stored turns, filled in by listing queries.
	"""

	id: str
	user_id: str
	title: str
	created_at: float
	updated_at: float
	message_count: Optional[int] = None

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


@dataclass
class MessageRecord:
	"""One stored conversation turn. Immutable once written.

	Attributes:
		id: Primary key (uuid4 hex).
		chat_id: Conversation the turn belongs to.
		role: Either "user" or "assistant".
		content: Sanitized text, at most 10000 characters.
		image_data: Optional inline image as a data URI (user turns only).
		created_at: Unix timestamp (seconds) when the turn was stored.
	"""

	id: str
	chat_id: str
	role: str
	content: str
	image_data: Optional[str] = None
	created_at: float = 0.0

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)
