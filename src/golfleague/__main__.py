from __future__ import annotations

from dataclasses import dataclass

import cappa

from golfleague.cli.commands.admin import AdminCommand  # noqa: TC001
from golfleague.cli.commands.player import PlayerCommand  # noqa: TC001
from golfleague.cli.commands.score import (
    ScoreCommand,  # noqa: TC001 # cappa needs to know about this at runtime
)
from golfleague.cli.commands.season import SeasonCommand  # noqa: TC001


@dataclass
class Main:
    subcommand: cappa.Subcommands[
        ScoreCommand | PlayerCommand | SeasonCommand | AdminCommand
    ]


def main():
    cappa.invoke(Main)


if __name__ == "__main__":
    main()
