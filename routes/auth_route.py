"""FastAPI routes for account registration and sessions."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.auth_controller import current_user, login, logout, register
from utils.errors import ErrorKind, http_error

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=201)
async def register_route(request: Request, payload: RegisterPayload):
    try:
        return await register(request, payload.email, payload.password, payload.name)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Registration error")
        raise http_error(ErrorKind.SERVER) from exc


@router.post("/login")
async def login_route(request: Request, payload: LoginPayload):
    try:
        return await login(request, payload.email, payload.password)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Login error")
        raise http_error(ErrorKind.SERVER) from exc


@router.post("/logout")
async def logout_route(request: Request):
    return await logout(request)


@router.get("/me")
async def me_route(request: Request):
    try:
        return await current_user(request)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Current user lookup error")
        raise http_error(ErrorKind.SERVER) from exc
