"""Concurrency utilities: run a batch of independent async tasks and collect every outcome"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from component_build.core.errors import AggregateTaskError

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T]]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskOutcome(Generic[T]):
    """Outcome of one task: either a value or an error"""
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "TaskOutcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "TaskOutcome[T]":
        return cls(error=error)


@dataclass
class TaskStats:
    """Statistics of one batch run"""
    total_tasks: int = 0
    completed_tasks: int = 0
    failed_tasks: int = 0
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        if self.start_time is not None and self.end_time is not None:
            return self.end_time - self.start_time
        return None

    @property
    def success_rate(self) -> float:
        if self.total_tasks == 0:
            return 0.0
        return self.completed_tasks / self.total_tasks

    def __str__(self):
        duration = self.duration or 0.0
        return (
            f"TaskStats(total={self.total_tasks}, "
            f"completed={self.completed_tasks}, "
            f"failed={self.failed_tasks}, "
            f"success_rate={self.success_rate:.2%}, "
            f"duration={duration:.2f}s)"
        )


async def _settle(task: TaskFactory) -> TaskOutcome:
    try:
        value = await task()
    except Exception as e:
        return TaskOutcome.failure(e)
    return TaskOutcome.success(value)


async def settle_all(tasks: Sequence[TaskFactory]) -> List[TaskOutcome]:
    """
    Start every task concurrently and wait for all of them to settle

    Unlike a fail-fast join, a failing task does not abandon the others.

    Args:
        tasks: Zero-argument callables returning awaitables

    Returns:
        Outcomes, index-aligned with ``tasks``
    """
    if not tasks:
        return []
    return list(await asyncio.gather(*(_settle(task) for task in tasks)))


async def run_all(
    tasks: Sequence[TaskFactory],
    labels: Optional[Sequence[Any]] = None,
) -> List[Any]:
    """
    Run every task concurrently and collect the values

    Args:
        tasks: Zero-argument callables returning awaitables
        labels: Optional labels, index-aligned with ``tasks``, used in the
            aggregate error message

    Returns:
        Values of all tasks, index-aligned with ``tasks``

    Raises:
        AggregateTaskError: If one or more tasks failed. Values of the tasks
            that succeeded are discarded.
    """
    stats = TaskStats(total_tasks=len(tasks), start_time=time.monotonic())
    outcomes = await settle_all(tasks)
    stats.end_time = time.monotonic()

    errors = []
    failed_labels = []
    for index, outcome in enumerate(outcomes):
        if outcome.ok:
            stats.completed_tasks += 1
        else:
            stats.failed_tasks += 1
            errors.append(outcome.error)
            failed_labels.append(labels[index] if labels is not None else None)

    logger.debug(str(stats))

    if errors:
        raise AggregateTaskError(len(tasks), errors, failed_labels if labels is not None else None)

    return [outcome.value for outcome in outcomes]


def labelled(label: str, task: TaskFactory, prefix: str = "") -> TaskFactory:
    """
    Wrap a task so its start, success and failure are logged

    Args:
        label: Name of the task in log output
        task: The task to wrap
        prefix: Optional prefix (e.g. the parent stage name)

    Returns:
        A task with the same result
    """
    name = f"{prefix} -> {label}" if prefix else label

    async def wrapper():
        logger.info(f"Starting '{name}'...")
        try:
            result = await task()
        except Exception:
            logger.error(f"Failed '{name}'")
            raise
        logger.info(f"Finished '{name}'")
        return result

    return wrapper
