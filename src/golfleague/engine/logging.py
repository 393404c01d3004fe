from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, get_args

from rich.highlighter import Highlighter
from rich.logging import RichHandler
from typing_extensions import override

from golfleague.core.types import AchievementKey

if TYPE_CHECKING:
    from rich.text import Text

ACHIEVEMENT_KEYS = set(get_args(AchievementKey))

# --- PATTERNS ---
ACHIEVEMENT_PATTERN = re.compile(
    rf"\b({'|'.join(map(re.escape, sorted(ACHIEVEMENT_KEYS)))})\b",
)
SCORE_PATTERN = re.compile(r"\bScore \d+\b")

COLOR = {
    "bonus_gain": "bold green",
    "bonus_loss": "bold red",
    "warning": "bold bright_red",
    "achievement": "bold #ffaf00",  # orange
    "score": "bold #29b8db",  # cyan
    "prefix": "grey50",
}


class RichMarkupFormatter(logging.Formatter):
    @override
    def format(self, record: logging.LogRecord) -> str:
        # "golfleague.engine.coordinator" -> "coordinator"
        prefix = record.name.rsplit(".", 1)[-1]
        message = record.getMessage()
        return f"[{COLOR['prefix']}]{prefix:<13}[/{COLOR['prefix']}]  {message}"


class LeagueLogHighlighter(Highlighter):
    @override
    def highlight(self, text: Text) -> None:
        text.highlight_regex(r"\+1 bonus\b", COLOR["bonus_gain"])
        text.highlight_regex(r"-1 bonus\b", COLOR["bonus_loss"])
        text.highlight_regex(r"!!!", COLOR["warning"])
        text.highlight_regex(SCORE_PATTERN, COLOR["score"])
        text.highlight_regex(ACHIEVEMENT_PATTERN, COLOR["achievement"])


def configure_logging(level: int | str = logging.INFO) -> None:
    logger = logging.getLogger()
    logger.setLevel(level)
    handler = RichHandler(
        markup=True,
        show_path=False,
        show_time=False,
        highlighter=LeagueLogHighlighter(),
    )
    handler.setFormatter(RichMarkupFormatter())
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
