from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
	"EssaySection",
	"Feedback",
	"FeedbackContent",
	"HistoryEntry",
	"View",
	"VocabularyUpgrade",
	"WritingTask",
]


class EssaySection(str, Enum):
	INTRODUCTION = "Introduction"
	BODY_1 = "Body1"
	BODY_2 = "Body2"
	CONCLUSION = "Conclusion"

	@property
	def label(self) -> str:
		return _SECTION_LABELS[self]


_SECTION_LABELS = {
	EssaySection.INTRODUCTION: "Introduction",
	EssaySection.BODY_1: "Body Paragraph 1",
	EssaySection.BODY_2: "Body Paragraph 2",
	EssaySection.CONCLUSION: "Conclusion",
}


class View(str, Enum):
	PRACTICE = "practice"
	HISTORY = "history"


class _WireModel(BaseModel):
	# camelCase on the wire, snake_case in Python; values never change after creation
	model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

	def to_dict(self) -> dict[str, Any]:
		return self.model_dump(by_alias=True, mode="json")


class WritingTask(_WireModel):
	source_sentence: str = Field(alias="sourceSentence", min_length=1)
	topic: str
	section: EssaySection
	context: str


class VocabularyUpgrade(_WireModel):
	original: str
	improved: str
	explanation: str


class FeedbackContent(_WireModel):
	"""The part of a critique produced by the generation service."""

	band7_suggestion: str = Field(alias="band7Suggestion")
	band8_plus_suggestion: str = Field(alias="band8PlusSuggestion")
	grammatical_analysis: tuple[str, ...] = Field(alias="grammaticalAnalysis")
	vocabulary_upgrades: tuple[VocabularyUpgrade, ...] = Field(alias="vocabularyUpgrades")
	cohesion_advice: str = Field(alias="cohesionAdvice")


class Feedback(FeedbackContent):
	"""Service critique plus the learner's own translation, attached locally."""

	original_translation: str = Field(alias="originalTranslation")

	@classmethod
	def from_content(cls, content: FeedbackContent, translation: str) -> Feedback:
		fields = dict(content)
		fields["original_translation"] = translation
		return cls(**fields)


class HistoryEntry(_WireModel):
	id: str
	task: WritingTask
	user_translation: str = Field(alias="userTranslation")
	feedback: Feedback
	created_at: datetime = Field(alias="createdAt")
