"""FastAPI routes for conversation turns."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.message_controller import create_message, list_messages
from utils.errors import ErrorKind, http_error

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])


class MessagePayload(BaseModel):
	chat_id: Optional[str] = None
	content: Optional[str] = None
	role: Optional[str] = None


@router.post("", status_code=201)
async def create_message_route(request: Request, payload: MessagePayload):
	try:
		return await create_message(request, payload.chat_id, payload.content, payload.role)
	except HTTPException:
		raise
	except Exception as exc:
		LOGGER.exception("Create message error")
		raise http_error(ErrorKind.SERVER) from exc


@router.get("/{chat_id}")
async def list_messages_route(request: Request, chat_id: str):
	"""Return every turn of the chat, oldest first."""
	try:
		return await list_messages(request, chat_id)
	except HTTPException:
		raise
	except Exception as exc:
		LOGGER.exception("Get messages error")
		raise http_error(ErrorKind.SERVER) from exc
