from typing import Any, Dict, Optional

from fastapi import Request

from dal.chat_dal import ChatDAL
from models.chat_models import ChatRecord
from utils.auth import require_user_id
from utils.errors import AppError, ErrorKind, http_error, to_http_error
from utils.validation import sanitize_input, validate_chat_title


def caller_id(request: Request) -> str:
    """Return the signed-in user id or raise HTTPException(401)."""
    try:
        return require_user_id(request)
    except AppError as exc:
        raise to_http_error(exc) from exc


async def load_owned_chat(request: Request, chat_id: str) -> ChatRecord:
    """Return the chat if the caller owns it.

    Raises:
        HTTPException(401) without a session, 404 if the chat is missing,
        403 if another user owns it.
    """
    user_id = caller_id(request)
    chat = await ChatDAL(request.app.state.db_initializer).get_chat(chat_id)
    if chat is None:
        raise http_error(ErrorKind.NOT_FOUND)
    if chat.user_id != user_id:
        raise http_error(ErrorKind.FORBIDDEN)
    return chat


async def list_chats(request: Request) -> Dict[str, Any]:
    """Return the caller's chats, most recently updated first."""
    user_id = caller_id(request)
    chats = await ChatDAL(request.app.state.db_initializer).list_chats(user_id)
    return {"chats": [chat.to_dict() for chat in chats]}


async def create_chat(request: Request, title: Optional[str]) -> Dict[str, Any]:
    """Create a chat titled `title` (1-100 characters after trimming)."""
    user_id = caller_id(request)
    clean_title = sanitize_input(title or "")
    if not validate_chat_title(clean_title):
        raise http_error(ErrorKind.VALIDATION, "Invalid chat title.")
    chat = await ChatDAL(request.app.state.db_initializer).create_chat(user_id, clean_title)
    return {"chat": chat.to_dict()}


async def get_chat(request: Request, chat_id: str) -> Dict[str, Any]:
    chat = await load_owned_chat(request, chat_id)
    return {"chat": chat.to_dict()}


async def delete_chat(request: Request, chat_id: str) -> Dict[str, Any]:
    """Delete an owned chat together with its messages."""
    chat = await load_owned_chat(request, chat_id)
    await ChatDAL(request.app.state.db_initializer).delete_chat(chat.id)
    return {"success": True}
