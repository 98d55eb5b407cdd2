"""Data models for HAC entities."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from .cookies import CookieJar


@dataclass
class HACSession:
    """State of one login session. Never shared between operations."""

    base_url: str
    username: str
    password: str
    cookie_jar: CookieJar = field(default_factory=CookieJar)

    def url(self, path: str) -> str:
        """Build an absolute portal URL from a relative path."""
        return f"{self.base_url}/{path.lstrip('/')}"


@dataclass
class StudentIdentity:
    """The logged in student."""

    name: str = ""
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CourseSummary:
    """A single row of the course listing."""

    class_name: str
    class_id: str | None = None
    course_code: str = ""
    teacher_name: str = ""
    teacher_email: str = ""
    period: str = ""
    grade_display: str = ""
    average: float | None = None

    @property
    def has_grade(self) -> bool:
        """Return True when a numeric average was found."""
        return self.average is not None

    @property
    def key(self) -> tuple[str | None, str]:
        """Deduplication key for listing rows."""
        return (self.class_id, self.class_name)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["has_grade"] = self.has_grade
        return data


@dataclass
class CourseSummaries:
    """Result of a course listing fetch."""

    courses: list[CourseSummary] = field(default_factory=list)
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "courses": [course.as_dict() for course in self.courses],
            "error": self.error,
        }


@dataclass
class AssignmentCategory:
    """One category line of a course's category breakdown."""

    name: str
    earned_points: str = ""
    max_points: str = ""
    percentage: str = ""


@dataclass
class Assignment:
    """One assignment row; values are kept as the portal displays them."""

    name: str
    date_due: str = ""
    date_assigned: str = ""
    turned_in_date: str = ""
    category: str = ""
    score: str = ""
    weight: str = ""
    weighted_score: str = ""
    total_points: str = ""
    weighted_total_points: str = ""
    percentage: str = ""


@dataclass
class CourseDetail:
    """Assignment level detail for a single course."""

    class_name: str
    teacher_name: str = ""
    current_average: float | None = None
    last_updated: str = ""
    assignments: list[Assignment] = field(default_factory=list)
    categories: list[AssignmentCategory] = field(default_factory=list)
    marking_period: str = ""
    section_key: str | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
