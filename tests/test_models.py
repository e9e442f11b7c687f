from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from conftest import make_feedback, make_task
from sentence_trainer.models import EssaySection, Feedback, FeedbackContent


def test_section_labels_for_display():
    assert [section.value for section in EssaySection] == ["Introduction", "Body1", "Body2", "Conclusion"]
    assert EssaySection.BODY_2.label == "Body Paragraph 2"
    assert EssaySection.CONCLUSION.label == "Conclusion"


def test_task_is_immutable():
    task = make_task()
    with pytest.raises(PydanticValidationError):
        task.topic = "Crime"


def test_feedback_from_content_keeps_content_and_attaches_translation():
    base = make_feedback("first")
    content = FeedbackContent(**{name: getattr(base, name) for name in FeedbackContent.model_fields})

    feedback = Feedback.from_content(content, "second")

    assert feedback.original_translation == "second"
    assert feedback.vocabulary_upgrades == base.vocabulary_upgrades
    data = feedback.to_dict()
    assert data["originalTranslation"] == "second"
    assert data["band8PlusSuggestion"] == base.band8_plus_suggestion
    assert data["vocabularyUpgrades"][0] == {
        "original": "free",
        "improved": "free of charge",
        "explanation": "More formal register.",
    }
