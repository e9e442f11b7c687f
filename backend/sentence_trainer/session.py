"""Session state, its transition rules, and the controller that drives them.

All mutation goes through :func:`reduce`, a pure ``(state, action) -> state``
function. Guards live there too, so a rejected action raises
:class:`ValidationError` before the controller issues any request.

Per task the session moves ``empty -> loading -> ready``; from ``ready`` a
submission either lands feedback or falls back to ``ready`` with the
feedback slot untouched. With feedback shown, the recall drill cycles
``hidden -> recall input -> compared -> hidden``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Union

from .errors import GenerationError, ValidationError
from .gateway import GenerationGateway
from .models import Feedback, HistoryEntry, View, WritingTask

__all__ = [
	"Action",
	"ComparisonHidden",
	"ErrorDismissed",
	"FeedbackFailed",
	"FeedbackLoaded",
	"FeedbackRequested",
	"HistoryReviewed",
	"InputChanged",
	"RecallEntered",
	"RecallInputChanged",
	"RecallLeft",
	"RecallRevealed",
	"SessionController",
	"SessionState",
	"TaskFailed",
	"TaskLoaded",
	"TaskRequested",
	"ViewSwitched",
	"reduce",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
	task: WritingTask | None = None
	user_input: str = ""
	feedback: Feedback | None = None
	loading: bool = False
	evaluating: bool = False
	recall_mode: bool = False
	recall_input: str = ""
	show_comparison: bool = False
	view: View = View.PRACTICE
	history: tuple[HistoryEntry, ...] = ()
	error: str | None = None

	@property
	def task_status(self) -> str:
		if self.loading:
			return "loading"
		return "ready" if self.task is not None else "empty"

	@property
	def can_submit(self) -> bool:
		return (
			self.task is not None
			and not self.loading
			and not self.evaluating
			and self.feedback is None
			and bool(self.user_input.strip())
		)

	def to_dict(self) -> dict[str, Any]:
		return {
			"taskStatus": self.task_status,
			"task": self.task.to_dict() if self.task else None,
			"userInput": self.user_input,
			"feedback": self.feedback.to_dict() if self.feedback else None,
			"loading": self.loading,
			"evaluating": self.evaluating,
			"recallMode": self.recall_mode,
			"recallInput": self.recall_input,
			"showComparison": self.show_comparison,
			"view": self.view.value,
			"historyCount": len(self.history),
			"error": self.error,
		}


# ---------------------------------------------------------------------- actions


@dataclass(frozen=True)
class TaskRequested:
	pass


@dataclass(frozen=True)
class TaskLoaded:
	task: WritingTask


@dataclass(frozen=True)
class TaskFailed:
	message: str | None


@dataclass(frozen=True)
class InputChanged:
	text: str


@dataclass(frozen=True)
class FeedbackRequested:
	text: str


@dataclass(frozen=True)
class FeedbackLoaded:
	entry: HistoryEntry


@dataclass(frozen=True)
class FeedbackFailed:
	message: str | None


@dataclass(frozen=True)
class RecallEntered:
	pass


@dataclass(frozen=True)
class RecallInputChanged:
	text: str


@dataclass(frozen=True)
class RecallRevealed:
	pass


@dataclass(frozen=True)
class ComparisonHidden:
	pass


@dataclass(frozen=True)
class RecallLeft:
	pass


@dataclass(frozen=True)
class ViewSwitched:
	view: View


@dataclass(frozen=True)
class HistoryReviewed:
	entry_id: str


@dataclass(frozen=True)
class ErrorDismissed:
	pass


Action = Union[
	TaskRequested,
	TaskLoaded,
	TaskFailed,
	InputChanged,
	FeedbackRequested,
	FeedbackLoaded,
	FeedbackFailed,
	RecallEntered,
	RecallInputChanged,
	RecallRevealed,
	ComparisonHidden,
	RecallLeft,
	ViewSwitched,
	HistoryReviewed,
	ErrorDismissed,
]

_RECALL_RESET = {"recall_mode": False, "recall_input": "", "show_comparison": False}


def _require_idle(state: SessionState, what: str) -> None:
	if state.loading:
		raise ValidationError(f"cannot {what} while a task is loading")
	if state.evaluating:
		raise ValidationError(f"cannot {what} while an evaluation is in flight")


def reduce(state: SessionState, action: Action) -> SessionState:
	"""Return the state that follows ``action``; raise if it is not allowed now."""

	if isinstance(action, TaskRequested):
		_require_idle(state, "request a new task")
		return replace(state, loading=True, feedback=None, user_input="", error=None, **_RECALL_RESET)

	if isinstance(action, TaskLoaded):
		return replace(state, loading=False, task=action.task)

	if isinstance(action, TaskFailed):
		return replace(state, loading=False, error=action.message)

	if isinstance(action, InputChanged):
		if state.evaluating:
			raise ValidationError("cannot edit the translation while it is being evaluated")
		if state.feedback is not None:
			raise ValidationError("feedback for this translation is already shown; request a new task")
		return replace(state, user_input=action.text)

	if isinstance(action, FeedbackRequested):
		if state.task is None:
			raise ValidationError("no task to translate")
		_require_idle(state, "submit")
		if state.feedback is not None:
			raise ValidationError("feedback for this task is already shown; request a new task")
		if not action.text.strip():
			raise ValidationError("translation is empty")
		return replace(state, evaluating=True, user_input=action.text, error=None)

	if isinstance(action, FeedbackLoaded):
		entry = action.entry
		return replace(state, evaluating=False, feedback=entry.feedback, history=(entry,) + state.history)

	if isinstance(action, FeedbackFailed):
		return replace(state, evaluating=False, error=action.message)

	if isinstance(action, RecallEntered):
		if state.feedback is None:
			raise ValidationError("recall mode needs model sentences to recall")
		return replace(state, recall_mode=True, recall_input="", show_comparison=False)

	if isinstance(action, RecallInputChanged):
		if not state.recall_mode:
			raise ValidationError("not in recall mode")
		return replace(state, recall_input=action.text)

	if isinstance(action, RecallRevealed):
		if not state.recall_mode:
			raise ValidationError("not in recall mode")
		if not state.recall_input.strip():
			raise ValidationError("recall input is empty")
		return replace(state, recall_mode=False, show_comparison=True)

	if isinstance(action, ComparisonHidden):
		if not state.show_comparison:
			raise ValidationError("no recall comparison is shown")
		return replace(state, show_comparison=False, recall_input="")

	if isinstance(action, RecallLeft):
		return replace(state, recall_mode=False)

	if isinstance(action, ViewSwitched):
		return replace(state, view=action.view)

	if isinstance(action, HistoryReviewed):
		_require_idle(state, "review history")
		entry = next((item for item in state.history if item.id == action.entry_id), None)
		if entry is None:
			raise KeyError(f"history entry '{action.entry_id}' not found")
		return replace(
			state,
			task=entry.task,
			user_input=entry.user_translation,
			feedback=entry.feedback,
			view=View.PRACTICE,
			error=None,
			**_RECALL_RESET,
		)

	if isinstance(action, ErrorDismissed):
		return replace(state, error=None)

	raise TypeError(f"unknown action {action!r}")


# ------------------------------------------------------------------- controller


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class SessionController:
	"""Owns one session's state and issues the two gateway calls.

	The only suspension points are the gateway awaits. The ``loading`` and
	``evaluating`` flags are set before awaiting, so a second request issued
	meanwhile is rejected rather than queued.
	"""

	def __init__(
		self,
		gateway: GenerationGateway,
		state: SessionState | None = None,
		*,
		clock: Callable[[], datetime] = _utcnow,
	) -> None:
		self._gateway = gateway
		self._state = state or SessionState()
		self._clock = clock

	@property
	def state(self) -> SessionState:
		return self._state

	def dispatch(self, action: Action) -> SessionState:
		try:
			self._state = reduce(self._state, action)
		except ValidationError as exc:
			logger.info("rejected %s: %s", type(action).__name__, exc)
			raise
		return self._state

	# ------------------------------------------------------------------ remote
	async def start_new_task(self) -> WritingTask:
		self.dispatch(TaskRequested())
		try:
			task = await self._gateway.request_task()
		except GenerationError as exc:
			logger.warning("task request failed: %s", exc)
			self.dispatch(TaskFailed(str(exc)))
			raise
		except BaseException:
			self.dispatch(TaskFailed(None))
			raise
		self.dispatch(TaskLoaded(task))
		return task

	async def submit_translation(self, text: str | None = None) -> Feedback:
		if text is None:
			text = self._state.user_input
		self.dispatch(FeedbackRequested(text))
		task = self._state.task
		if task is None:
			raise ValidationError("no task to translate")
		try:
			feedback = await self._gateway.request_feedback(task, text)
		except GenerationError as exc:
			logger.warning("feedback request failed: %s", exc)
			self.dispatch(FeedbackFailed(str(exc)))
			raise
		except BaseException:
			self.dispatch(FeedbackFailed(None))
			raise
		if feedback.original_translation != text:
			# the learner's text is always the local copy, never the service's echo
			feedback = feedback.model_copy(update={"original_translation": text})
		entry = HistoryEntry(
			id=uuid.uuid4().hex,
			task=task,
			user_translation=text,
			feedback=feedback,
			created_at=self._next_timestamp(),
		)
		self.dispatch(FeedbackLoaded(entry))
		return feedback

	def _next_timestamp(self) -> datetime:
		now = self._clock()
		if self._state.history:
			latest = self._state.history[0].created_at
			if now <= latest:
				now = latest + timedelta(microseconds=1)
		return now

	# ------------------------------------------------------------------- local
	def update_input(self, text: str) -> SessionState:
		return self.dispatch(InputChanged(text))

	def enter_recall_mode(self) -> SessionState:
		return self.dispatch(RecallEntered())

	def update_recall_input(self, text: str) -> SessionState:
		return self.dispatch(RecallInputChanged(text))

	def reveal_recall_comparison(self) -> SessionState:
		return self.dispatch(RecallRevealed())

	def exit_recall_comparison(self) -> SessionState:
		return self.dispatch(ComparisonHidden())

	def leave_recall_mode(self) -> SessionState:
		return self.dispatch(RecallLeft())

	def switch_view(self, view: View) -> SessionState:
		return self.dispatch(ViewSwitched(view))

	def review_history_entry(self, entry_id: str) -> SessionState:
		return self.dispatch(HistoryReviewed(entry_id))

	def dismiss_error(self) -> SessionState:
		return self.dispatch(ErrorDismissed())

	def recall_comparison(self) -> dict[str, str]:
		state = self._state
		if not state.show_comparison or state.feedback is None:
			raise ValidationError("no recall comparison is shown")
		return {
			"recall": state.recall_input,
			"band7Suggestion": state.feedback.band7_suggestion,
			"band8PlusSuggestion": state.feedback.band8_plus_suggestion,
		}
