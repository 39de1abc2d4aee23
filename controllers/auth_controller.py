"""Registration, login and logout against the USERS table."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiosqlite
from fastapi import Request

from dal.user_dal import UserDAL
from utils.auth import hash_password, login_session, logout_session, require_user_id, verify_password
from utils.errors import AppError, ErrorKind, http_error, to_http_error
from utils.validation import sanitize_input, validate_email, validate_password

LOGGER = logging.getLogger(__name__)


def _users(request: Request) -> UserDAL:
	return UserDAL(request.app.state.db_initializer)


async def register(
	request: Request,
	email: Optional[str],
	password: Optional[str],
	name: Optional[str],
) -> Dict[str, Any]:
	"""Create an account and sign the caller in."""
	if not email or not password or not name:
		raise http_error(ErrorKind.VALIDATION, "Missing required fields.")
	email = email.strip().lower()
	if not validate_email(email):
		raise http_error(ErrorKind.VALIDATION, "Invalid email format.")
	password_problem = validate_password(password)
	if password_problem:
		raise http_error(ErrorKind.VALIDATION, password_problem)
	clean_name = sanitize_input(name)
	if not clean_name:
		raise http_error(ErrorKind.VALIDATION, "Missing required fields.")

	users = _users(request)
	if await users.get_user_by_email(email) is not None:
		raise http_error(ErrorKind.CONFLICT)

	password_hash = await asyncio.to_thread(hash_password, password)
	try:
		user = await users.create_user(email, clean_name, password_hash)
	except aiosqlite.IntegrityError as exc:
		# Lost a race with a concurrent registration of the same email.
		raise http_error(ErrorKind.CONFLICT) from exc

	login_session(request, user.id)
	LOGGER.info("Registered user %s", user.id)
	return {"user": user.public()}


async def login(request: Request, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
	if not email or not password:
		raise http_error(ErrorKind.VALIDATION, "Missing credentials.")
	user = await _users(request).get_user_by_email(email.strip().lower())
	if user is None or not await asyncio.to_thread(verify_password, password, user.password_hash):
		raise http_error(ErrorKind.UNAUTHORIZED, "Invalid credentials.")
	login_session(request, user.id)
	return {"user": user.public()}


async def logout(request: Request) -> Dict[str, Any]:
	logout_session(request)
	return {"success": True}


async def current_user(request: Request) -> Dict[str, Any]:
	"""Return the signed-in user, clearing sessions that point at deleted accounts."""
	try:
		user_id = require_user_id(request)
	except AppError as exc:
		raise to_http_error(exc) from exc
	user = await _users(request).get_user_by_id(user_id)
	if user is None:
		logout_session(request)
		raise http_error(ErrorKind.UNAUTHORIZED)
	return {"user": user.public()}
