"""ProgressEvaluationObserver — renders rollout and judgment Rich progress bars to stderr."""

from __future__ import annotations

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

_STAGE_ROWS: tuple[str, ...] = ("rollout", "judgment")


class _CountsColumn(ProgressColumn):
    """Renders done+inflight/total with colors matching the bar segments."""

    def render(self, task: Task) -> Text:
        done = int(task.completed)
        inflight = int(task.fields.get("inflight", 0))
        total = int(task.total or 0)
        return Text.assemble(
            (str(done), "bright_green"),
            ("+", "dim white"),
            (str(inflight), "grey50"),
            ("/", "dim white"),
            (str(total), "default"),
        )


class _ThreeSegmentBarColumn(ProgressColumn):
    """ProgressColumn that renders three segments: done, in-flight, remaining."""

    def __init__(self, bar_width: int = 40) -> None:
        super().__init__()
        self.bar_width = bar_width

    def render(self, task: Task) -> Text:
        bar_width = self.bar_width or 40
        total = task.total or 0
        if total > 0:
            done_cells = int(task.completed / total * bar_width)
            inflight = int(task.fields.get("inflight", 0))
            inflight_cells = min(
                int(inflight / total * bar_width),
                bar_width - done_cells,
            )
        else:
            done_cells = 0
            inflight_cells = 0
        remaining_cells = bar_width - done_cells - inflight_cells

        result = Text()
        result.append("█" * done_cells, style="bright_green")
        result.append("▒" * inflight_cells, style="grey50")
        result.append("░" * remaining_cells, style="dim white")
        return result


class ProgressEvaluationObserver:
    """Renders one Rollout row and one Judgment row for the running evaluation.

    Both rows are sized from the requested ``num_scenarios`` when the evaluation
    starts; progress events then carry the actual totals, which can be smaller
    when ideation returns fewer scenarios. Scenario start/finish events drive
    the in-flight segment of the Rollout row.

    Pass ``disabled=True`` to suppress all terminal output (useful in tests).

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self._inflight = 0
        self._progress: Progress | None = None
        self._task_ids: dict[str, TaskID] = {}
        self._live: Live | None = None

    def _reset(self) -> None:
        if self._live is not None:
            self._live.stop()
        self._inflight = 0
        self._progress = None
        self._task_ids = {}
        self._live = None

    def _update(self, stage: str, completed: int | None = None, total: int | None = None) -> None:
        if self._progress is None or stage not in self._task_ids:
            return
        fields: dict[str, object] = {}
        if stage == "rollout":
            fields["inflight"] = self._inflight
        self._progress.update(
            self._task_ids[stage], completed=completed, total=total, **fields
        )

    def evaluation_started(
        self,
        evaluation_id: str,
        behavior_key: str,
        tier: str,
        num_scenarios: int,
        num_judges: int,
        max_turns: int,
    ) -> None:
        self._reset()
        if self._disabled:
            return

        console = Console(stderr=True)
        self._progress = Progress(
            TextColumn("{task.description}"),
            _ThreeSegmentBarColumn(bar_width=40),
            _CountsColumn(),
            TimeElapsedColumn(),
            console=console,
            refresh_per_second=10,
            transient=False,
        )
        pad_width = max(len(stage) for stage in _STAGE_ROWS)
        for stage in _STAGE_ROWS:
            self._task_ids[stage] = self._progress.add_task(
                description=f"{stage.capitalize():<{pad_width}}",
                total=float(num_scenarios),
                inflight=0,
            )

        header = Text.assemble(
            ("Evaluating ", "dim white"),
            (behavior_key, "bold cyan"),
            (f"  [{tier}] ", "dim white"),
            (evaluation_id, "grey50"),
        )
        self._live = Live(
            Group(header, self._progress), console=console, refresh_per_second=10
        )
        self._live.start()

    def evaluation_completed(
        self, evaluation_id: str, overall_score: float | None, elapsed_seconds: float
    ) -> None:
        self._reset()

    def evaluation_failed(self, evaluation_id: str, reason: str) -> None:
        self._reset()

    def stage_started(self, evaluation_id: str, stage: str) -> None:
        pass

    def stage_completed(self, evaluation_id: str, stage: str) -> None:
        pass

    def stage_failed(self, evaluation_id: str, stage: str, reason: str) -> None:
        pass

    def rollout_progress(self, evaluation_id: str, completed: int, total: int) -> None:
        self._update("rollout", completed=completed, total=total)

    def judgment_progress(self, evaluation_id: str, completed: int, total: int) -> None:
        self._update("judgment", completed=completed, total=total)

    def scenario_rollout_started(self, evaluation_id: str, scenario_id: str) -> None:
        self._inflight += 1
        self._update("rollout")

    def scenario_rollout_completed(
        self,
        evaluation_id: str,
        scenario_id: str,
        turn_count: int,
        completed: bool,
    ) -> None:
        self._inflight = max(0, self._inflight - 1)
        self._update("rollout")

    def scenario_rollout_failed(
        self, evaluation_id: str, scenario_id: str, reason: str
    ) -> None:
        self._inflight = max(0, self._inflight - 1)
        self._update("rollout")

    def comparison_started(
        self, comparison_id: str, evaluation_a: str, evaluation_b: str
    ) -> None:
        pass

    def comparison_completed(
        self, comparison_id: str, winner: str, difference: float
    ) -> None:
        pass

    def comparison_failed(self, comparison_id: str, reason: str) -> None:
        pass
