from __future__ import annotations

import logging
import secrets
import string
import threading

from .gateway import GenerationGateway
from .session import SessionController

__all__ = ["SessionManager"]

logger = logging.getLogger(__name__)


class SessionManager:
	"""Registry of independent practice sessions; all of them share one gateway."""

	def __init__(self, gateway: GenerationGateway) -> None:
		self.gateway = gateway
		self._sessions: dict[str, SessionController] = {}
		self._lock = threading.Lock()

	def create_session(self) -> tuple[str, SessionController]:
		session_id = _sid()
		controller = SessionController(self.gateway)
		with self._lock:
			self._sessions[session_id] = controller
		logger.debug("session created", extra={"session_id": session_id})
		return session_id, controller

	def get(self, session_id: str) -> SessionController:
		with self._lock:
			controller = self._sessions.get(session_id)
		if controller is None:
			raise KeyError(f"session '{session_id}' not found")
		return controller

	def __len__(self) -> int:
		with self._lock:
			return len(self._sessions)


def _sid(length: int = 12) -> str:
	alphabet = string.ascii_lowercase + string.digits
	return "".join(secrets.choice(alphabet) for _ in range(length))
