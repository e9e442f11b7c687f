from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..errors import GenerationError, ValidationError
from ..manager import SessionManager
from ..models import View
from ..session import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["practice"])


class TextRequest(BaseModel):
	text: str


class SubmitRequest(BaseModel):
	# When omitted, the text last sent to /input is evaluated
	text: str | None = None


class ViewRequest(BaseModel):
	view: View


def get_manager(request: Request) -> SessionManager:
	return request.app.state.manager


@contextmanager
def _http_errors() -> Iterator[None]:
	try:
		yield
	except ValidationError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	except KeyError as exc:
		detail = exc.args[0] if exc.args else "not found"
		raise HTTPException(status_code=404, detail=str(detail)) from exc
	except GenerationError as exc:
		raise HTTPException(status_code=502, detail=str(exc)) from exc


def _session(manager: SessionManager, sid: str) -> SessionController:
	with _http_errors():
		return manager.get(sid)


def _snapshot(controller: SessionController) -> Dict[str, Any]:
	return controller.state.to_dict()


@router.post("", status_code=201)
async def create_session(manager: SessionManager = Depends(get_manager)):
	sid, controller = manager.create_session()
	try:
		await controller.start_new_task()
	except GenerationError as exc:
		# Session still exists; the failure sits in its error slot until the user retries via /task
		logger.warning("first task for session %s failed: %s", sid, exc)
	return {"session": sid, "state": _snapshot(controller)}


@router.get("/{sid}")
async def get_state(sid: str, manager: SessionManager = Depends(get_manager)):
	return _snapshot(_session(manager, sid))


@router.post("/{sid}/task")
async def new_task(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		task = await controller.start_new_task()
	return {"task": task.to_dict(), "state": _snapshot(controller)}


@router.put("/{sid}/input")
async def update_input(sid: str, req: TextRequest, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		controller.update_input(req.text)
	return _snapshot(controller)


@router.post("/{sid}/submit")
async def submit(sid: str, req: SubmitRequest, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		feedback = await controller.submit_translation(req.text)
	return {"feedback": feedback.to_dict(), "state": _snapshot(controller)}


@router.post("/{sid}/recall")
async def enter_recall(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		controller.enter_recall_mode()
	return _snapshot(controller)


@router.put("/{sid}/recall/input")
async def update_recall_input(sid: str, req: TextRequest, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		controller.update_recall_input(req.text)
	return _snapshot(controller)


@router.post("/{sid}/recall/reveal")
async def reveal_recall(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		controller.reveal_recall_comparison()
		comparison = controller.recall_comparison()
	return {"comparison": comparison, "state": _snapshot(controller)}


@router.post("/{sid}/recall/hide")
async def hide_comparison(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		controller.exit_recall_comparison()
	return _snapshot(controller)


@router.post("/{sid}/recall/leave")
async def leave_recall(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	controller.leave_recall_mode()
	return _snapshot(controller)


@router.get("/{sid}/recall/comparison")
async def get_comparison(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		return controller.recall_comparison()


@router.put("/{sid}/view")
async def switch_view(sid: str, req: ViewRequest, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	controller.switch_view(req.view)
	return _snapshot(controller)


@router.get("/{sid}/history")
async def get_history(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	return {"history": [entry.to_dict() for entry in controller.state.history]}


@router.post("/{sid}/history/{entry_id}/review")
async def review_entry(sid: str, entry_id: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	with _http_errors():
		controller.review_history_entry(entry_id)
	return _snapshot(controller)


@router.delete("/{sid}/error")
async def dismiss_error(sid: str, manager: SessionManager = Depends(get_manager)):
	controller = _session(manager, sid)
	controller.dismiss_error()
	return _snapshot(controller)
