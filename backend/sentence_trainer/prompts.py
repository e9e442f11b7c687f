from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .models import EssaySection, WritingTask


# (topic, essay question the reference essay answers)
REFERENCE_TOPICS: List[Tuple[str, str]] = [
	("Education", "Free university"),
	("Technology", "Social media & communication"),
	("Environment", "International vs individual effort"),
	("Work", "Remote work/Telecommuting"),
	("Health", "Fast food tax"),
	("Society", "Wealth gap/Inequality"),
	("Crime", "Prison vs Rehabilitation"),
	("Tourism", "Benefits vs Impacts"),
	("Transport", "Banning cars in city centers"),
	("Children & Family", "Screen time"),
]

SECTION_VALUES: List[str] = [section.value for section in EssaySection]


def _topic_lines() -> str:
	return "\n".join(f"{idx}. {name} ({angle})" for idx, (name, angle) in enumerate(REFERENCE_TOPICS, start=1))


def examiner_context() -> str:
	return (
		"You are an IELTS Writing Task 2 expert. You have a database of 10 high-quality essays covering:\n"
		f"{_topic_lines()}\n\n"
		"When generating tasks, pick one of these specific topics and create a Vietnamese sentence "
		"that matches the style and complexity of these essays.\n"
	)


def build_task_prompt() -> str:
	sections = ", ".join(f"{value} ({section.label})" for value, section in zip(SECTION_VALUES, EssaySection))
	return (
		f"{examiner_context()}\n"
		"Generate a random IELTS Writing Task 2 sentence in Vietnamese based on one of the 10 topics.\n"
		f"Randomly pick an essay section, using exactly one of these labels: {sections}.\n\n"
		"Return ONLY a JSON object with keys:\n"
		"- sourceSentence: the sentence in Vietnamese.\n"
		"- topic: the essay topic name.\n"
		f"- section: one of {', '.join(SECTION_VALUES)}.\n"
		"- context: what this sentence specifically does in the essay structure."
	)


def build_feedback_prompt(task: WritingTask, translation: str) -> str:
	return (
		f"{examiner_context()}\n"
		f"Evaluate the user's translation for the sentence: \"{task.source_sentence}\"\n"
		f"Topic: {task.topic} ({task.section.label})\n"
		f"User's input: \"{translation}\"\n\n"
		"Provide:\n"
		"1. Band 7.0 version (Academic, clear, complex).\n"
		"2. Band 8.5+ version (Sophisticated, precise lexical choices).\n"
		"3. Analysis of errors and vocabulary improvements (original word, improved word, explanation).\n"
		f"4. Cohesion advice specific to the {task.section.label} of the essay."
	)


TASK_RESPONSE_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"sourceSentence": {"type": "STRING"},
		"topic": {"type": "STRING"},
		"section": {"type": "STRING", "format": "enum", "enum": SECTION_VALUES},
		"context": {"type": "STRING"},
	},
	"required": ["sourceSentence", "topic", "section", "context"],
}

FEEDBACK_RESPONSE_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"band7Suggestion": {"type": "STRING"},
		"band8PlusSuggestion": {"type": "STRING"},
		"grammaticalAnalysis": {
			"type": "ARRAY",
			"items": {"type": "STRING"},
		},
		"vocabularyUpgrades": {
			"type": "ARRAY",
			"items": {
				"type": "OBJECT",
				"properties": {
					"original": {"type": "STRING"},
					"improved": {"type": "STRING"},
					"explanation": {"type": "STRING"},
				},
				"required": ["original", "improved", "explanation"],
			},
		},
		"cohesionAdvice": {"type": "STRING"},
	},
	"required": ["band7Suggestion", "band8PlusSuggestion", "grammaticalAnalysis", "vocabularyUpgrades", "cohesionAdvice"],
}
