"""Course catalog: training progress per course and module."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from agent_lounge.domain.entities import Course
from agent_lounge.domain.events import ModuleCompleted
from agent_lounge.domain.exceptions import NotFoundError
from agent_lounge.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)


class CourseCatalog:
    """Holds courses and records module completions."""

    def __init__(
        self,
        courses: Iterable[Course] = (),
        event_bus: EventBus | None = None,
        owner_id: str = "",
    ) -> None:
        self._courses: dict[str, Course] = {c.id: c for c in courses}
        self._event_bus = event_bus
        self._owner_id = owner_id

    @property
    def courses(self) -> list[Course]:
        return list(self._courses.values())

    def get(self, course_id: str) -> Course:
        course = self._courses.get(course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    def add(self, course: Course) -> None:
        self._courses[course.id] = course

    @property
    def modules_completed(self) -> int:
        return sum(1 for c in self._courses.values() for m in c.modules if m.completed)

    @property
    def courses_completed(self) -> int:
        return sum(1 for c in self._courses.values() if c.is_complete)

    @property
    def required_outstanding(self) -> list[Course]:
        return [c for c in self._courses.values() if c.required and not c.is_complete]

    def complete_module(self, course_id: str, module_id: str) -> bool:
        """Mark a module complete.

        Returns ``False`` if it already was.  Raises ``NotFoundError`` for an
        unknown course or module.
        """
        course = self.get(course_id)
        module = course.find_module(module_id)
        if module is None:
            raise NotFoundError("TrainingModule", module_id)
        if module.completed:
            return False
        module.completed = True
        finished = course.is_complete
        logger.debug("Completed module %s of %s", module_id, course_id)
        if finished:
            logger.info("Course completed: %s", course.title)
        if self._event_bus is not None:
            self._event_bus.publish(
                ModuleCompleted(
                    source_id=self._owner_id,
                    course_id=course_id,
                    module_id=module_id,
                    course_completed=finished,
                )
            )
        return True
