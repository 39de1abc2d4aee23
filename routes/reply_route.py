"""FastAPI route for AI reply generation."""

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from controllers.reply_controller import generate_reply

router = APIRouter(prefix="/api/ai", tags=["ai"])


class GeneratePayload(BaseModel):
    chat_id: Optional[str] = None
    user_message: Optional[str] = None
    image_url: Optional[str] = None


@router.post("/generate")
async def generate_route(request: Request, payload: GeneratePayload):
    """Generate and store an assistant reply for the caller's chat.

    Every failure, including unexpected ones, is already classified by the
    orchestrator and arrives here as an HTTPException.
    """
    return await generate_reply(request, payload.chat_id, payload.user_message, payload.image_url)
