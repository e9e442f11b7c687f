"""Stateless request/decode façade over the generation service.

Each call builds a prompt, declares the response shape, issues exactly one
request and decodes the answer strictly. There is no retry and no caching;
anything that does not match the declared shape is a ``GenerationError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import GenerationError
from .models import Feedback, FeedbackContent, WritingTask
from .prompts import FEEDBACK_RESPONSE_SCHEMA, TASK_RESPONSE_SCHEMA, build_feedback_prompt, build_task_prompt

__all__ = ["GenerationGateway", "JsonGenerator"]

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


class JsonGenerator(Protocol):
	async def generate_json(self, prompt: str, response_schema: Dict[str, Any], *, operation: str) -> str: ...


def _decode(raw: str, model: Type[_M], operation: str) -> _M:
	try:
		return model.model_validate_json(raw, strict=True)
	except PydanticValidationError as exc:
		problems = "; ".join(
			f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
		)
		logger.warning("%s response did not match the declared shape: %s", operation, problems)
		raise GenerationError(operation, f"response does not match declared shape ({problems})") from exc


class GenerationGateway:
	def __init__(self, client: JsonGenerator) -> None:
		self._client = client

	async def request_task(self) -> WritingTask:
		raw = await self._client.generate_json(build_task_prompt(), TASK_RESPONSE_SCHEMA, operation="task")
		return _decode(raw, WritingTask, "task")

	async def request_feedback(self, task: WritingTask, user_text: str) -> Feedback:
		prompt = build_feedback_prompt(task, user_text)
		raw = await self._client.generate_json(prompt, FEEDBACK_RESPONSE_SCHEMA, operation="feedback")
		content = _decode(raw, FeedbackContent, "feedback")
		return Feedback.from_content(content, user_text)
