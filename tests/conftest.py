from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from sentence_trainer.models import EssaySection, Feedback, FeedbackContent, VocabularyUpgrade, WritingTask

TASK_PAYLOAD: dict[str, Any] = {
    "sourceSentence": "Nhiều người tin rằng giáo dục đại học nên được miễn phí cho tất cả mọi người.",
    "topic": "Education",
    "section": "Body1",
    "context": "Topic sentence introducing the first supporting argument.",
}

FEEDBACK_PAYLOAD: dict[str, Any] = {
    "band7Suggestion": "Many people believe that university education should be free for everyone.",
    "band8PlusSuggestion": "It is widely held that tertiary education ought to be provided free of charge to all.",
    "grammaticalAnalysis": ["Missing article before 'university education'."],
    "vocabularyUpgrades": [
        {"original": "free", "improved": "free of charge", "explanation": "More formal register."},
    ],
    "cohesionAdvice": "Open the paragraph with a clear signpost such as 'Firstly'.",
}


def make_task(**overrides: Any) -> WritingTask:
    data = {
        "source_sentence": TASK_PAYLOAD["sourceSentence"],
        "topic": "Education",
        "section": EssaySection.BODY_1,
        "context": TASK_PAYLOAD["context"],
    }
    data.update(overrides)
    return WritingTask(**data)


def make_feedback(translation: str, **overrides: Any) -> Feedback:
    content = FeedbackContent(
        band7_suggestion=FEEDBACK_PAYLOAD["band7Suggestion"],
        band8_plus_suggestion=FEEDBACK_PAYLOAD["band8PlusSuggestion"],
        grammatical_analysis=tuple(FEEDBACK_PAYLOAD["grammaticalAnalysis"]),
        vocabulary_upgrades=(VocabularyUpgrade(original="free", improved="free of charge", explanation="More formal register."),),
        cohesion_advice=FEEDBACK_PAYLOAD["cohesionAdvice"],
    )
    feedback = Feedback.from_content(content, translation)
    return feedback.model_copy(update=overrides) if overrides else feedback


class StubGateway:
    """Scripted stand-in for GenerationGateway.

    ``tasks`` and ``feedback`` are queues of return values; an exception in
    the queue is raised instead. ``feedback`` items may be callables taking
    the submitted text. Setting ``gate`` holds every call until it is set.
    """

    def __init__(self, tasks: list[Any] | None = None, feedback: list[Any] | None = None) -> None:
        self.tasks = list(tasks or [])
        self.feedback = list(feedback or [])
        self.task_calls = 0
        self.feedback_calls: list[tuple[WritingTask, str]] = []
        self.gate: asyncio.Event | None = None

    async def request_task(self) -> WritingTask:
        self.task_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        item = self.tasks.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def request_feedback(self, task: WritingTask, user_text: str) -> Feedback:
        self.feedback_calls.append((task, user_text))
        if self.gate is not None:
            await self.gate.wait()
        item = self.feedback.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(user_text)
        return item


class FakeGenerator:
    """Stands in for GeminiClient.generate_json and records every prompt."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any], str]] = []

    async def generate_json(self, prompt: str, response_schema: dict[str, Any], *, operation: str) -> str:
        self.calls.append((prompt, response_schema, operation))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item if isinstance(item, str) else json.dumps(item)


@pytest.fixture
def task() -> WritingTask:
    return make_task()
