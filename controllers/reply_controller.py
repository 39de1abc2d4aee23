"""Orchestrate one reply-generation request end to end."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import aiosqlite
from fastapi import Request

from dal.chat_dal import ChatDAL
from dal.message_dal import MessageDAL
from models.chat_models import MessageRecord
from models.generation_models import GenerationRequest
from services.context_assembler import ContextAssembler
from services.news.freshness import FreshnessAugmenter
from services.openai.reply_generator import ReplyGenerator
from services.openai.response_parser import FALLBACK_REPLY
from services.rate_limiter import FixedWindowRateLimiter
from utils.auth import current_user_id
from utils.database_init import AsyncDatabaseInitializer
from utils.errors import AppError, ErrorKind, to_http_error
from utils.validation import ensure_image_data, sanitize_input

LOGGER = logging.getLogger(__name__)


class ReplyOrchestrator:
	"""Validate, persist the user turn, build context, augment, generate, persist the reply.

	The user turn is stored before the model is called, so it survives a
	failed generation. A failed generation stores no assistant turn and does
	not refresh the chat's `updated_at`. Nothing is retried.
	"""

	def __init__(
		self,
		db: AsyncDatabaseInitializer,
		augmenter: FreshnessAugmenter,
		generator: ReplyGenerator,
		rate_limiter: FixedWindowRateLimiter,
	) -> None:
		self.chats = ChatDAL(db)
		self.messages = MessageDAL(db)
		self.assembler = ContextAssembler(self.messages)
		self.augmenter = augmenter
		self.generator = generator
		self.rate_limiter = rate_limiter

	async def generate(
		self,
		user_id: Optional[str],
		chat_id: Optional[str],
		user_message: Optional[str],
		image_data: Optional[str] = None,
	) -> MessageRecord:
		"""Run the pipeline and return the stored assistant turn.

		Raises:
			AppError: One classified failure; already logged.
		"""
		try:
			return await self._run(user_id, chat_id, user_message, image_data)
		except AppError as exc:
			self._log_failure(exc.kind, user_id, chat_id, exc.detail)
			raise
		except aiosqlite.Error as exc:
			self._log_failure(ErrorKind.SERVER, user_id, chat_id, f"database error: {exc}")
			raise AppError(ErrorKind.SERVER, str(exc)) from exc
		except Exception as exc:  # pylint: disable=broad-exception-caught
			self._log_failure(ErrorKind.SERVER, user_id, chat_id, repr(exc))
			raise AppError(ErrorKind.SERVER, repr(exc)) from exc

	async def _run(
		self,
		user_id: Optional[str],
		chat_id: Optional[str],
		user_message: Optional[str],
		image_data: Optional[str],
	) -> MessageRecord:
		if not user_id:
			raise AppError(ErrorKind.UNAUTHORIZED, "no session")
		if not self.rate_limiter.check(user_id):
			raise AppError(ErrorKind.RATE_LIMIT, "local quota exceeded")

		text = sanitize_input(user_message or "")
		if not chat_id or not text:
			raise AppError(ErrorKind.VALIDATION, "chat_id and user_message are required", public_message="Missing required fields.")
		image = ensure_image_data(image_data)

		chat = await self.chats.get_chat(chat_id)
		if chat is None:
			raise AppError(ErrorKind.NOT_FOUND, "chat does not exist")
		if chat.user_id != user_id:
			raise AppError(ErrorKind.FORBIDDEN, "chat owned by another user")

		await self.messages.create_message(chat_id, "user", text, image)

		turns = await self.assembler.build(chat_id)
		freshness = await self._augment(text)
		reply = await self.generator.generate(GenerationRequest(turns=turns, freshness=freshness))

		assistant = await self.messages.create_message(chat_id, "assistant", sanitize_input(reply) or FALLBACK_REPLY)
		await self.chats.touch_chat(chat_id)
		return assistant

	async def _augment(self, text: str) -> str:
		try:
			return await self.augmenter.get_context(text)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			LOGGER.warning("Freshness augmentation failed, continuing without it: %s", exc)
			return ""

	@staticmethod
	def _log_failure(kind: ErrorKind, user_id: Optional[str], chat_id: Optional[str], detail: str) -> None:
		LOGGER.error(
			"Reply generation failed: kind=%s user=%s chat=%s at=%s detail=%s",
			kind.value,
			user_id,
			chat_id,
			datetime.now(timezone.utc).isoformat(),
			detail,
		)


def build_orchestrator(request: Request) -> ReplyOrchestrator:
	"""Assemble the orchestrator from the shared objects on app.state."""
	state = request.app.state
	return ReplyOrchestrator(
		db=state.db_initializer,
		augmenter=state.freshness,
		generator=state.reply_generator,
		rate_limiter=state.rate_limiter,
	)


async def generate_reply(
	request: Request,
	chat_id: Optional[str],
	user_message: Optional[str],
	image_data: Optional[str] = None,
) -> Dict[str, Any]:
	"""Controller for POST /api/ai/generate.

	Returns:
		A dict with the stored assistant turn under `message`.

	Raises:
		HTTPException: Carrying the classified kind and its stable message.
	"""
	orchestrator = build_orchestrator(request)
	try:
		assistant = await orchestrator.generate(current_user_id(request), chat_id, user_message, image_data)
	except AppError as exc:
		raise to_http_error(exc) from exc
	return {"message": assistant.to_dict()}
