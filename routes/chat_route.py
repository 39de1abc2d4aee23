"""FastAPI routes for chat CRUD."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.chat_controller import create_chat, delete_chat, get_chat, list_chats
from utils.errors import ErrorKind, http_error

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chats", tags=["chats"])


class ChatPayload(BaseModel):
	title: Optional[str] = None


@router.get("")
async def list_chats_route(request: Request):
	try:
		return await list_chats(request)
	except HTTPException:
		raise
	except Exception as exc:
		LOGGER.exception("Get chats error")
		raise http_error(ErrorKind.SERVER) from exc


@router.post("", status_code=201)
async def create_chat_route(request: Request, payload: ChatPayload):
	try:
		return await create_chat(request, payload.title)
	except HTTPException:
		raise
	except Exception as exc:
		LOGGER.exception("Create chat error")
		raise http_error(ErrorKind.SERVER) from exc


@router.get("/{chat_id}")
async def get_chat_route(request: Request, chat_id: str):
	try:
		return await get_chat(request, chat_id)
	except HTTPException:
		raise
	except Exception as exc:
		LOGGER.exception("Get chat error")
		raise http_error(ErrorKind.SERVER) from exc


@router.delete("/{chat_id}")
async def delete_chat_route(request: Request, chat_id: str):
	try:
		return await delete_chat(request, chat_id)
	except HTTPException:
		raise
	except Exception as exc:
		LOGGER.exception("Delete chat error")
		raise http_error(ErrorKind.SERVER) from exc
