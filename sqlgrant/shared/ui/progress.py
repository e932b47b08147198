"""Sequential task runner that reports each step on the console."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape as escape_markup


class TaskStatus(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class Task:
    """A named step. ``run`` receives no arguments; its return value is kept."""

    title: str
    run: Callable[[], Any]
    status: TaskStatus = TaskStatus.PENDING
    result: Any = None


_MARKERS = {
    TaskStatus.SUCCESS: "[green]✔[/green]",
    TaskStatus.FAILED: "[red]✖[/red]",
    TaskStatus.SKIPPED: "[yellow]↓[/yellow]",
}


class TaskList:
    """Run tasks in order, stopping at the first failure.

    Usage:
        tasks = TaskList([Task("Connecting to database", connect)], console=console)
        tasks.run()

    The exception from a failing task is re-raised after it has been
    reported; later tasks are left ``PENDING``.
    """

    def __init__(self, tasks: Sequence[Task], console: Console | None = None):
        self.tasks = list(tasks)
        self.console = console or Console(stderr=True)

    def run(self) -> list[Task]:
        for task in self.tasks:
            self._run_task(task)
        return self.tasks

    def _run_task(self, task: Task) -> None:
        try:
            if self.console.is_terminal:
                with self.console.status(escape_markup(task.title)):
                    task.result = task.run()
            else:
                task.result = task.run()
        except Exception:
            self.report(task.title, TaskStatus.FAILED)
            task.status = TaskStatus.FAILED
            raise
        task.status = TaskStatus.SUCCESS
        self.report(task.title, TaskStatus.SUCCESS)

    def report(self, title: str, status: TaskStatus) -> None:
        line = f"{_MARKERS[status]} {escape_markup(title)}"
        if status is TaskStatus.SKIPPED:
            line += " [dim]\\[skipped][/dim]"
        self.console.print(line, highlight=False)
