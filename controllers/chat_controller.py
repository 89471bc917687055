"""Chatbot session helpers for the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, HTTPException, Request, UploadFile

from services.chat.chat_service import ChatService, EmptyMessageError, SessionBusyError, TurnResult
from services.chat.playback import PlaybackController, PlaybackError, PlaybackEvent
from services.chat.session_store import SessionStore
from services.chat.speech_renderer import SpeechRenderer
from utils.media_validation import read_audio_bytes


def _store(request: Request) -> SessionStore:
	return request.app.state.session_store


def _chat(request: Request) -> ChatService:
	return request.app.state.chat_service


def _renderer(request: Request) -> SpeechRenderer:
	return request.app.state.speech_renderer


def _session_or_404(request: Request, session_id: str):
	try:
		return _store(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail="Session not found") from exc


def _turn_response(request: Request, result: TurnResult, speak: bool, background_tasks: BackgroundTasks) -> Dict[str, Any]:
	# Audio is rendered after the reply text has been sent.
	if speak and result.model_message is not None:
		background_tasks.add_task(_renderer(request).render, result.session_id, result.model_message.id)
	payload = result.to_dict()
	payload["speech_scheduled"] = bool(speak and result.model_message is not None)
	return payload


async def start_session(request: Request, language: Optional[str]) -> Dict[str, Any]:
	"""Create a new chat session and return its state."""
	state = _store(request).create(language)
	return state.to_dict()


async def get_session(request: Request, session_id: str) -> Dict[str, Any]:
	return _session_or_404(request, session_id).to_dict()


async def end_session(request: Request, session_id: str) -> Dict[str, Any]:
	_session_or_404(request, session_id)
	_store(request).delete(session_id)
	return {"session_id": session_id, "deleted": True}


async def send_text_message(
	request: Request,
	session_id: str,
	text: str,
	speak: bool,
	background_tasks: BackgroundTasks,
) -> Dict[str, Any]:
	"""Send a typed message and return the reply."""
	_session_or_404(request, session_id)
	try:
		result = await _chat(request).send_text(session_id, text)
	except EmptyMessageError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	except SessionBusyError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	return _turn_response(request, result, speak, background_tasks)


async def send_audio_message(
	request: Request,
	session_id: str,
	audio_file: UploadFile,
	speak: bool,
	background_tasks: BackgroundTasks,
) -> Dict[str, Any]:
	"""Send a recorded message; the reply echoes the transcription."""
	_session_or_404(request, session_id)
	audio_bytes, mime_type = await read_audio_bytes(audio_file)
	try:
		result = await _chat(request).send_audio(session_id, audio_bytes, mime_type)
	except SessionBusyError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	return _turn_response(request, result, speak, background_tasks)


async def set_recording(request: Request, session_id: str, recording: bool) -> Dict[str, Any]:
	_session_or_404(request, session_id)
	chat = _chat(request)
	try:
		state = chat.start_recording(session_id) if recording else chat.stop_recording(session_id)
	except SessionBusyError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	return {"session_id": session_id, "is_recording": state.is_recording, "is_pending": state.is_pending}


async def render_speech(request: Request, session_id: str, message_id: str) -> Dict[str, Any]:
	"""Synthesize audio for one message now; failures come back as a notice."""
	state = _session_or_404(request, session_id)
	if state.find(message_id) is None:
		raise HTTPException(status_code=404, detail="Message not found")
	result = await _renderer(request).render(session_id, message_id)
	return {"message_id": result.message_id, "audio_reference": result.audio_reference, "notice": result.notice}


async def apply_playback_event(
	request: Request,
	session_id: str,
	message_id: str,
	event: PlaybackEvent,
	current_time: Optional[float],
	duration: Optional[float],
) -> Dict[str, Any]:
	"""Apply a player event and return the session's messages."""
	state = _session_or_404(request, session_id)
	controller: PlaybackController = request.app.state.playback_controller
	try:
		message = controller.dispatch(session_id, message_id, event, current_time=current_time, duration=duration)
	except PlaybackError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	if message is None:
		raise HTTPException(status_code=404, detail="Message not found")
	return {
		"message": message.to_dict(),
		"active_message_id": state.active_message_id,
	}
