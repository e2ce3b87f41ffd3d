"""Keyword-triggered reply table used by the simulated participant."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, Field, field_validator

from chat_relay.application.exceptions import ValidationError

TEMPLATE_FIELDS = {"sender": "", "server_time": ""}


@dataclass(frozen=True, slots=True)
class ResponseCategory:
    name: str
    triggers: tuple[str, ...]
    replies: tuple[str, ...]

    def matches(self, lowered_text: str) -> bool:
        return any(trigger in lowered_text for trigger in self.triggers)


@dataclass(frozen=True, slots=True)
class ResponderRules:
    categories: tuple[ResponseCategory, ...]
    default_replies: tuple[str, ...]


DEFAULT_RULES = ResponderRules(
    categories=(
        ResponseCategory(
            name="greeting",
            triggers=("hello", "hi", "hey", "good morning", "good evening"),
            replies=(
                "Hello {sender}! 👋 How are you doing today?",
                "Hi there {sender}! Great to see you here! 😊",
                "Hey {sender}! What's on your mind?",
            ),
        ),
        ResponseCategory(
            name="weather",
            triggers=("weather", "sunny", "rain", "cold", "hot"),
            replies=(
                "I can't check the weather, but I hope it's nice where you are! ☀️",
                "Weather talk, huh? I'm just here in the digital realm! 🌤️",
                "Sounds like weather is on your mind! Stay cozy! 🌈",
            ),
        ),
        ResponseCategory(
            name="tech",
            triggers=("javascript", "react", "code", "programming", "developer", "tech"),
            replies=(
                "Ah, a fellow tech enthusiast! 💻 Love talking about development!",
                "Programming is awesome! What are you building? 🚀",
                "Tech talk! I'm made with FastAPI and WebSockets myself! 🤖",
            ),
        ),
        ResponseCategory(
            name="emotion",
            triggers=("love", "like", "awesome", "great", "amazing", "wonderful"),
            replies=(
                "That sounds wonderful! ❤️",
                "I'm glad you're feeling positive! ✨",
                "Positivity is contagious! 🌟",
            ),
        ),
        ResponseCategory(
            name="question",
            triggers=("how", "what", "why", "when", "where", "?"),
            replies=(
                "That's a great question! 🤔 What do you think?",
                "Interesting question! I'd love to hear your thoughts on it! 💭",
                "You've got me thinking! Share more about what you mean! 🧠",
            ),
        ),
        ResponseCategory(
            name="time",
            triggers=("time", "late", "early", "morning", "night", "afternoon"),
            replies=(
                "It's {server_time} on my server! ⏰",
                "Time flies when you're having fun chatting! ⏳",
                "Time is just a construct... but yes, I can tell time! 🕐",
            ),
        ),
        ResponseCategory(
            name="goodbye",
            triggers=("bye", "goodbye", "see you", "later", "gtg"),
            replies=(
                "See you later, {sender}! Take care! 👋",
                "Goodbye! Thanks for the chat! 🌟",
                "Until next time! Have a great day! 😊",
            ),
        ),
    ),
    default_replies=(
        "That's interesting! Tell me more! 🤔",
        "I hear you! What else is on your mind? 💭",
        "Thanks for sharing that, {sender}! 😊",
        "Hmm, that's something to think about! 🧐",
        "I appreciate you chatting with me! What else would you like to talk about? 🗣️",
        "That's a unique perspective! 🌟",
        "I'm listening! Please continue! 👂",
        "You're quite thoughtful, {sender}! 💡",
    ),
)


def _check_templates(replies: list[str]) -> list[str]:
    for template in replies:
        try:
            template.format_map(TEMPLATE_FIELDS)
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(f"bad reply template {template!r}: {exc}") from exc
    return replies


class _CategoryDocument(BaseModel):
    name: str
    triggers: list[str] = Field(min_length=1)
    replies: list[str] = Field(min_length=1)

    @field_validator("triggers")
    @classmethod
    def lower_triggers(cls, triggers: list[str]) -> list[str]:
        lowered = [t.lower() for t in triggers]
        if any(not t for t in lowered):
            raise ValueError("triggers must be non-empty strings")
        return lowered

    @field_validator("replies")
    @classmethod
    def check_replies(cls, replies: list[str]) -> list[str]:
        return _check_templates(replies)


class _RulesDocument(BaseModel):
    categories: list[_CategoryDocument]
    default: list[str] = Field(min_length=1)

    @field_validator("default")
    @classmethod
    def check_default(cls, replies: list[str]) -> list[str]:
        return _check_templates(replies)


def rules_from_dict(raw: dict[str, Any]) -> ResponderRules:
    try:
        doc = _RulesDocument.model_validate(raw)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid responder rules: {exc}") from exc
    return ResponderRules(
        categories=tuple(
            ResponseCategory(c.name, tuple(c.triggers), tuple(c.replies))
            for c in doc.categories
        ),
        default_replies=tuple(doc.default),
    )


def load_rules(path: str | Path | None) -> ResponderRules:
    """Load the reply table once at startup; ``None`` selects the built-in one."""
    if path is None:
        return DEFAULT_RULES
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValidationError(f"Cannot read responder rules from {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValidationError(f"Responder rules in {path} must be a JSON object")
    return rules_from_dict(raw)
