from __future__ import annotations

from pydantic import ConfigDict, model_validator
from pydantic_settings import BaseSettings

DEFAULT_WELCOME_TEXT = (
    "Welcome to the chat! 👋 I'm your friendly server bot. I'll respond to your "
    "messages automatically! Try saying 'hello' or asking me about the weather! ✨"
)


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "info"

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    WS_HEARTBEAT_SECONDS: int = 30

    BOT_NAME: str = "🤖 ChatBot"
    WELCOME_TEXT: str = DEFAULT_WELCOME_TEXT
    WELCOME_DELAY_SECONDS: float = 0.5
    REPLY_DELAY_MIN_SECONDS: float = 1.0
    REPLY_DELAY_MAX_SECONDS: float = 3.0
    CANCEL_REPLIES_ON_DISCONNECT: bool = False
    SHUTDOWN_GRACE_SECONDS: float = 3.0
    RESPONDER_RULES_FILE: str | None = None

    CHAT_SERVER_URL: str = "ws://localhost:8000/ws/chat"
    EVENT_LOG_SIZE: int = 50

    @model_validator(mode="after")
    def check_reply_delay(self) -> "Settings":
        if self.REPLY_DELAY_MIN_SECONDS < 0 or self.WELCOME_DELAY_SECONDS < 0:
            raise ValueError("delays must not be negative")
        if self.REPLY_DELAY_MAX_SECONDS < self.REPLY_DELAY_MIN_SECONDS:
            raise ValueError("REPLY_DELAY_MAX_SECONDS must be >= REPLY_DELAY_MIN_SECONDS")
        return self

    @property
    def reply_delay(self) -> tuple[float, float]:
        return self.REPLY_DELAY_MIN_SECONDS, self.REPLY_DELAY_MAX_SECONDS

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
