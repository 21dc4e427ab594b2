"""FastAPI routes for chat sessions."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.chat_controller import (
	clear_chat,
	end_chat,
	get_chat,
	send_chat_message,
	start_chat,
	update_chat_api_key,
)

router = APIRouter(prefix="/chat/sessions")


class MessagePayload(BaseModel):
	text: str
	wait: bool = True


class ApiKeyPayload(BaseModel):
	api_key: Optional[str] = None


@router.post("")
async def start_chat_route(request: Request):
	try:
		return await start_chat(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}")
async def get_chat_route(request: Request, session_id: str):
	return await get_chat(request, session_id)


@router.post("/{session_id}/messages")
async def post_message_route(request: Request, session_id: str, payload: MessagePayload):
	try:
		return await send_chat_message(request, session_id, payload.text, payload.wait)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/clear")
async def clear_chat_route(request: Request, session_id: str):
	return await clear_chat(request, session_id)


@router.put("/{session_id}/api-key")
async def api_key_route(request: Request, session_id: str, payload: ApiKeyPayload):
	try:
		return await update_chat_api_key(request, session_id, payload.api_key)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def end_chat_route(request: Request, session_id: str):
	return await end_chat(request, session_id)
