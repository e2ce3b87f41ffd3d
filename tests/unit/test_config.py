from __future__ import annotations

import pydantic
import pytest

from chat_relay.config import Settings


def test_reply_delay_bounds_must_be_ordered():
    with pytest.raises(pydantic.ValidationError):
        Settings(REPLY_DELAY_MIN_SECONDS=3, REPLY_DELAY_MAX_SECONDS=1)


def test_negative_delay_rejected():
    with pytest.raises(pydantic.ValidationError):
        Settings(WELCOME_DELAY_SECONDS=-1)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("BOT_NAME", "Robo")
    monkeypatch.setenv("CANCEL_REPLIES_ON_DISCONNECT", "true")

    cfg = Settings(REPLY_DELAY_MIN_SECONDS=1, REPLY_DELAY_MAX_SECONDS=2)

    assert cfg.BOT_NAME == "Robo"
    assert cfg.CANCEL_REPLIES_ON_DISCONNECT is True
    assert cfg.reply_delay == (1, 2)
