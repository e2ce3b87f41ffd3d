from __future__ import annotations

import random

from chat_relay.application.policies.responder_rules import (
    DEFAULT_RULES,
    ResponderRules,
    ResponseCategory,
)
from chat_relay.application.ports.clock import Clock, SystemClock, format_clock_time


class ResponderPolicy:
    """Picks a canned reply for a message.

    Categories are scanned in table order and the first one with a trigger
    contained in the lower-cased text wins. The reply is drawn uniformly from
    that category, or from the default pool when nothing matches.
    """

    def __init__(
        self,
        rules: ResponderRules = DEFAULT_RULES,
        *,
        rng: random.Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._rules = rules
        self._rng = rng or random.Random()
        self._clock = clock or SystemClock()

    @property
    def rules(self) -> ResponderRules:
        return self._rules

    def match_category(self, text: str) -> ResponseCategory | None:
        lowered = text.lower()
        for category in self._rules.categories:
            if category.matches(lowered):
                return category
        return None

    def reply(self, text: str, sender: str) -> str:
        category = self.match_category(text)
        pool = category.replies if category else self._rules.default_replies
        return self._render(self._rng.choice(pool), sender)

    def _render(self, template: str, sender: str) -> str:
        values = {"sender": sender, "server_time": ""}
        # clock is only read when a template asks for it
        if "{server_time}" in template:
            values["server_time"] = format_clock_time(self._clock.now())
        return template.format_map(values)
