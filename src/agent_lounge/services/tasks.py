"""Task engine: to-do records and their completion lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from agent_lounge.domain.entities import Task
from agent_lounge.domain.enums import Priority, TaskCategory
from agent_lounge.domain.events import TaskCompleted, TaskReopened
from agent_lounge.domain.exceptions import NotFoundError
from agent_lounge.domain.values import new_id
from agent_lounge.infrastructure.event_bus import EventBus
from agent_lounge.services.gamification import GamificationEngine

logger = logging.getLogger(__name__)

TASK_COMPLETED = "Task completed"


class TaskEngine:
    """Owns one agent's tasks.

    Completion is a toggle with an asymmetric reward: the ``False -> True``
    edge awards ``performance_impact`` XP and counts as a qualifying activity
    for today; the ``True -> False`` edge (undo) revokes nothing.

    Parameters
    ----------
    gamification:
        Engine receiving XP awards and qualifying activities.
    clock:
        Returns the current time; its date is the qualifying-activity day.
    event_bus:
        Receives ``TaskCompleted`` / ``TaskReopened``.
    owner_id:
        Default assignee of new tasks.
    """

    def __init__(
        self,
        gamification: GamificationEngine,
        clock: Callable[[], datetime] = datetime.now,
        event_bus: EventBus | None = None,
        owner_id: str = "",
    ) -> None:
        self._gamification = gamification
        self._clock = clock
        self._event_bus = event_bus
        self._owner_id = owner_id
        self._tasks: dict[str, Task] = {}

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    @property
    def pending(self) -> list[Task]:
        return [t for t in self._tasks.values() if not t.completed]

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self._tasks.values() if t.completed)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def add_task(
        self,
        title: str,
        description: str = "",
        category: TaskCategory = TaskCategory.ADMIN,
        due_date: str = "",
        performance_impact: int = 0,
        priority: Priority = Priority.MEDIUM,
        assigned_to: str = "",
    ) -> Task:
        """Create an open task."""
        if performance_impact < 0:
            raise ValueError(f"performance_impact must be >= 0, got {performance_impact}")
        task = Task(
            id=new_id("task"),
            title=title,
            description=description,
            category=category,
            due_date=due_date,
            performance_impact=performance_impact,
            priority=priority,
            assigned_to=assigned_to or self._owner_id,
        )
        self._tasks[task.id] = task
        logger.debug("Added task %s (%s)", task.id, title)
        return task

    def restore(self, task: Task) -> None:
        self._tasks[task.id] = task

    def complete_task(self, task_id: str) -> bool:
        """Toggle completion of *task_id*.

        Returns the new ``completed`` value.  Raises ``NotFoundError`` for
        unknown ids and ``InvalidAmountError`` for a negative
        ``performance_impact``, leaving the task incomplete.
        """
        task = self.get(task_id)
        if task.completed:
            task.completed = False
            logger.debug("Reopened task %s", task_id)
            self._emit(TaskReopened(source_id=self._owner_id, task_id=task_id, title=task.title))
            return False

        # award first; a rejected amount leaves the task pending
        self._gamification.add_xp(task.performance_impact, TASK_COMPLETED)
        task.completed = True
        self._gamification.record_qualifying_activity(self._clock().date())
        self._emit(
            TaskCompleted(
                source_id=self._owner_id,
                task_id=task_id,
                title=task.title,
                xp_awarded=task.performance_impact,
            )
        )
        return True

    def _emit(self, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
