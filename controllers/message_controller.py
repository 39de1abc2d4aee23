"""Controllers for reading a chat's turns and appending one manually."""

from typing import Any, Dict, Optional

from fastapi import Request

from controllers.chat_controller import caller_id, load_owned_chat
from dal.chat_dal import ChatDAL
from dal.message_dal import MessageDAL
from utils.errors import ErrorKind, http_error
from utils.validation import sanitize_input

ALLOWED_ROLES = ("user", "assistant")


async def list_messages(request: Request, chat_id: str) -> Dict[str, Any]:
	"""Return the chat's full history in chronological order."""
	chat = await load_owned_chat(request, chat_id)
	messages = await MessageDAL(request.app.state.db_initializer).list_messages(chat.id)
	return {"messages": [message.to_dict() for message in messages]}


async def create_message(
	request: Request,
	chat_id: Optional[str],
	content: Optional[str],
	role: Optional[str],
) -> Dict[str, Any]:
	"""Append a turn without calling the model and refresh the chat timestamp."""
	caller_id(request)
	text = sanitize_input(content or "")
	if not chat_id or not text or not role:
		raise http_error(ErrorKind.VALIDATION, "Missing required fields.")
	if role not in ALLOWED_ROLES:
		raise http_error(ErrorKind.VALIDATION, "Invalid role.")

	chat = await load_owned_chat(request, chat_id)
	db = request.app.state.db_initializer
	message = await MessageDAL(db).create_message(chat.id, role, text)
	await ChatDAL(db).touch_chat(chat.id)
	return {"message": message.to_dict()}
