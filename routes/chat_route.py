"""FastAPI routes for the plant-care chatbot."""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel, Field

from controllers import chat_controller
from services.chat.playback import PlaybackEvent

router = APIRouter(prefix="/chat/sessions", tags=["chat"])


class StartPayload(BaseModel):
	language: Optional[str] = None


class MessagePayload(BaseModel):
	text: str = Field("", max_length=32_000)
	speak: bool = False


class PlaybackPayload(BaseModel):
	event: PlaybackEvent
	current_time: Optional[float] = Field(None, ge=0)
	duration: Optional[float] = Field(None, gt=0)


@router.post("")
async def start_session_route(request: Request, payload: StartPayload):
	return await chat_controller.start_session(request, payload.language)


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	return await chat_controller.get_session(request, session_id)


@router.delete("/{session_id}")
async def end_session_route(request: Request, session_id: str):
	return await chat_controller.end_session(request, session_id)


@router.post("/{session_id}/messages")
async def post_message_route(
	request: Request,
	session_id: str,
	payload: MessagePayload,
	background_tasks: BackgroundTasks,
):
	return await chat_controller.send_text_message(request, session_id, payload.text, payload.speak, background_tasks)


@router.post("/{session_id}/audio")
async def post_audio_route(
	request: Request,
	session_id: str,
	background_tasks: BackgroundTasks,
	audio: UploadFile = File(...),
	speak: bool = Form(False),
):
	return await chat_controller.send_audio_message(request, session_id, audio, speak, background_tasks)


@router.post("/{session_id}/recording/start")
async def start_recording_route(request: Request, session_id: str):
	return await chat_controller.set_recording(request, session_id, True)


@router.post("/{session_id}/recording/stop")
async def stop_recording_route(request: Request, session_id: str):
	return await chat_controller.set_recording(request, session_id, False)


@router.post("/{session_id}/messages/{message_id}/speech")
async def speech_route(request: Request, session_id: str, message_id: str):
	try:
		return await chat_controller.render_speech(request, session_id, message_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/messages/{message_id}/playback")
async def playback_route(request: Request, session_id: str, message_id: str, payload: PlaybackPayload):
	return await chat_controller.apply_playback_event(
		request, session_id, message_id, payload.event, payload.current_time, payload.duration
	)
