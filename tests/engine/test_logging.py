import logging

from rich.text import Text

from golfleague.engine.logging import (
    COLOR,
    LeagueLogHighlighter,
    RichMarkupFormatter,
)


def test_formatter_prefixes_short_logger_name():
    record = logging.LogRecord(
        "golfleague.engine.coordinator",
        logging.INFO,
        __file__,
        1,
        "Score %d accepted",
        (72,),
        None,
    )
    line = RichMarkupFormatter().format(record)
    assert "coordinator" in line
    assert "golfleague.engine" not in line
    assert line.endswith("Score 72 accepted")


def test_highlighter_marks_bonus_changes_and_achievements():
    text = Text("bob +1 bonus, alice -1 bonus, bob earned hot_streak_3")
    LeagueLogHighlighter().highlight(text)

    styles = {str(span.style) for span in text.spans}
    assert COLOR["bonus_gain"] in styles
    assert COLOR["bonus_loss"] in styles
    assert COLOR["achievement"] in styles
