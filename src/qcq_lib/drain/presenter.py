# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass, field
from datetime import timedelta

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from tabulate import Line, TableFormat, tabulate

from qcq_lib.core.common import format_duration, get_panel_width
from qcq_lib.core.config import CFG
from qcq_lib.properties.job import Job
from qcq_lib.properties.states import JobState


class ResultsPresenter:
    """
    Present the outcome of a drained batch: job counts and the list of failed jobs.
    """

    # Mapping of human-readable color names to ANSI escape codes.
    _ANSI_COLORS = {
        "default": "",
        "white": "\033[37m",
        "bright_red": "\033[91m",
        "bright_green": "\033[92m",
        "bright_yellow": "\033[93m",
        "grey70": "\033[38;5;249m",
        "bold": "\033[1m",
        "reset": "\033[0m",
    }

    # Table formatting configuration for `tabulate`.
    _COMPACT_TABLE = TableFormat(
        lineabove=Line("", "", "", ""),
        linebelowheader="",
        linebetweenrows="",
        linebelow=Line("", "", "", ""),
        headerrow=("", "  ", ""),
        datarow=("", "  ", ""),
        padding=0,
        with_header_hide=["lineabove", "linebelow"],
    )

    def __init__(self, jobs: list[Job]):
        self._jobs = jobs
        self._stats = ResultsStatistics()
        for job in jobs:
            self._stats.addJob(job)

    def createResultsPanel(self, console: Console | None = None) -> Group:
        """
        Create a Rich panel summarizing the batch.

        Args:
            console (Console | None): Optional Rich Console instance.
                If None, a new Console will be created.

        Returns:
            Group: Rich Group containing the statistics and the failed jobs.
        """
        console = console or Console()

        content = [self._stats.createStatsTable()]
        failed = [job for job in self._jobs if job.state == JobState.FAILED]
        if failed:
            content.extend([Text(""), Text.from_ansi(self._createFailedTable(failed))])

        panel = Panel(
            Group(*content),
            title=Text("BATCH RESULTS", style=CFG.presenter.title_style, justify="center"),
            border_style=CFG.presenter.border_style,
            padding=(1, 1),
            width=get_panel_width(
                console, 1, CFG.presenter.min_width, CFG.presenter.max_width
            ),
            expand=False,
        )

        return Group(Text(""), panel, Text(""))

    def _createFailedTable(self, failed: list[Job]) -> str:
        """
        Build a compact table of failed jobs.

        At most `CFG.presenter.max_failed_listed` jobs are listed.
        """
        listed = failed[: CFG.presenter.max_failed_listed]
        rows = [
            [
                ResultsPresenter._color(job.name(), CFG.presenter.failed_style),
                job.job_id or "",
                str(job.error) if job.error else "",
            ]
            for job in listed
        ]

        table = tabulate(
            rows,
            headers=[
                ResultsPresenter._color(h, CFG.presenter.headers_style, bold=True)
                for h in ("Job", "Job ID", "Error")
            ],
            tablefmt=ResultsPresenter._COMPACT_TABLE,
            stralign="left",
        )

        if (hidden := len(failed) - len(listed)) > 0:
            table += f"\n... and {hidden} more failed job{'s' if hidden > 1 else ''}."

        return table

    @staticmethod
    def _color(string: str, color: str | None = None, bold: bool = False) -> str:
        """
        Apply ANSI color codes and optional bold styling to a string.
        """
        start = ResultsPresenter._ANSI_COLORS["bold"] if bold else ""
        if color:
            start += ResultsPresenter._ANSI_COLORS.get(color, "")
        end = ResultsPresenter._ANSI_COLORS["reset"] if color or bold else ""
        return f"{start}{string}{end}"


@dataclass
class ResultsStatistics:
    """
    Dataclass for collecting statistics about the jobs of a batch.
    """

    # Number of jobs in each state.
    n_jobs: dict[JobState, int] = field(default_factory=dict)

    # Sum of the wall times reported by the programs.
    total_time: float = 0.0

    def addJob(self, job: Job) -> None:
        self.n_jobs[job.state] = self.n_jobs.get(job.state, 0) + 1
        if job.result and job.result.time is not None:
            self.total_time += job.result.time

    def createStatsTable(self) -> Table:
        """
        Build a Rich table with the number of jobs in each state.
        """
        table = Table.grid(padding=(0, 2))
        table.add_column(justify="left")
        table.add_column(justify="right")

        total = sum(self.n_jobs.values())
        table.add_row(Text("Jobs", style="bold"), Text(str(total), style="bold"))

        for state in JobState:
            if (count := self.n_jobs.get(state, 0)) == 0:
                continue
            table.add_row(
                Text(str(state).capitalize(), style=ResultsStatistics._style(state)),
                Text(str(count), style=ResultsStatistics._style(state)),
            )

        if self.total_time > 0:
            table.add_row(
                Text("Program time"),
                Text(format_duration(timedelta(seconds=self.total_time))),
            )

        return table

    @staticmethod
    def _style(state: JobState) -> str:
        match state:
            case JobState.FINISHED:
                return CFG.presenter.finished_style
            case JobState.FAILED:
                return CFG.presenter.failed_style
            case _:
                return CFG.presenter.other_style
