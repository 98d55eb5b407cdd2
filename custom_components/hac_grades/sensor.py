"""Sensor platform for HAC Grades."""
from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DATA_COORDINATOR, DATA_COURSES, DATA_IDENTITY, DATA_LAST_UPDATED, DOMAIN
from .coordinator import HACDataUpdateCoordinator

_LOGGER = logging.getLogger(__name__)


def _slugify_course(course: dict[str, Any]) -> str:
    """Stable identifier for a course from its class id and name.

    Matches the listing's dedup key, so every listed course gets its own slug.
    """
    name = course.get("class_name", "").lower().replace(" ", "_")
    name = "".join(c for c in name if c.isalnum() or c == "_")
    if course.get("class_id"):
        return f"{course['class_id']}_{name}"
    return name


def _graded_averages(data: dict[str, Any]) -> list[float]:
    return [
        course["average"]
        for course in data.get(DATA_COURSES, [])
        if course.get("average") is not None
    ]


@dataclass
class HACGradesSensorEntityDescription(SensorEntityDescription):
    """Describes HAC Grades sensor entity."""

    value_fn: Callable[[dict[str, Any]], Any] | None = None
    attributes_fn: Callable[[dict[str, Any]], dict[str, Any]] | None = None


OVERALL_SENSORS = [
    HACGradesSensorEntityDescription(
        key="student_name",
        name="Student",
        icon="mdi:account-school",
        value_fn=lambda data: data.get(DATA_IDENTITY, {}).get("name") or None,
        attributes_fn=lambda data: {"last_updated": data.get(DATA_LAST_UPDATED)},
    ),
    HACGradesSensorEntityDescription(
        key="course_count",
        name="Total Courses",
        icon="mdi:counter",
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda data: len(data.get(DATA_COURSES, [])),
    ),
    HACGradesSensorEntityDescription(
        key="average",
        name="Average",
        icon="mdi:school",
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement="%",
        value_fn=lambda data: (
            round(sum(_graded_averages(data)) / len(_graded_averages(data)), 2)
            if _graded_averages(data)
            else None
        ),
    ),
]

COURSE_SENSOR = HACGradesSensorEntityDescription(
    key="average",
    name="Average",
    icon="mdi:book-open-page-variant",
    state_class=SensorStateClass.MEASUREMENT,
    native_unit_of_measurement="%",
    value_fn=lambda course: course.get("average"),
    attributes_fn=lambda course: {
        key: value for key, value in course.items() if key != "average"
    },
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up HAC Grades sensors."""
    coordinator: HACDataUpdateCoordinator = hass.data[DOMAIN][entry.entry_id][DATA_COORDINATOR]

    entities: list[SensorEntity] = [
        HACOverallSensor(coordinator, entry, description)
        for description in OVERALL_SENSORS
    ]

    courses = (coordinator.data or {}).get(DATA_COURSES, [])
    _LOGGER.debug("Creating sensors for %d courses", len(courses))

    for course in courses:
        entities.append(HACCourseSensor(coordinator, entry, COURSE_SENSOR, course))

    async_add_entities(entities)


class HACOverallSensor(CoordinatorEntity[HACDataUpdateCoordinator], SensorEntity):
    """Representation of a student-wide HAC sensor."""

    entity_description: HACGradesSensorEntityDescription
    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: HACDataUpdateCoordinator,
        entry: ConfigEntry,
        description: HACGradesSensorEntityDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = f"{entry.entry_id}_{description.key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.title,
            manufacturer="Home Access Center",
            model="Grade Portal",
        )

    @property
    def native_value(self) -> Any:
        """Return the state of the sensor."""
        if not self.coordinator.data or not self.entity_description.value_fn:
            return None
        return self.entity_description.value_fn(self.coordinator.data)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return additional attributes."""
        if not self.coordinator.data or not self.entity_description.attributes_fn:
            return None
        return self.entity_description.attributes_fn(self.coordinator.data)


class HACCourseSensor(CoordinatorEntity[HACDataUpdateCoordinator], SensorEntity):
    """Representation of a per-course HAC sensor."""

    entity_description: HACGradesSensorEntityDescription
    _attr_has_entity_name = False

    def __init__(
        self,
        coordinator: HACDataUpdateCoordinator,
        entry: ConfigEntry,
        description: HACGradesSensorEntityDescription,
        course: dict[str, Any],
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self.entity_description = description
        self._course_slug = _slugify_course(course)
        self._class_name = course.get("class_name", "")

        self._attr_unique_id = f"{entry.entry_id}_{self._course_slug}_{description.key}"
        self._attr_name = f"{self._class_name} {description.name}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, f"{entry.entry_id}_course_{self._course_slug}")},
            name=self._class_name,
            manufacturer="Home Access Center",
            model="Course",
            via_device=(DOMAIN, entry.entry_id),
        )

    @property
    def _course_data(self) -> dict[str, Any] | None:
        """Find this course in the latest listing."""
        if not self.coordinator.data:
            return None

        for course in self.coordinator.data.get(DATA_COURSES, []):
            if _slugify_course(course) == self._course_slug:
                return course
        return None

    @property
    def native_value(self) -> Any:
        """Return the state of the sensor."""
        course_data = self._course_data
        if not course_data or not self.entity_description.value_fn:
            return None
        return self.entity_description.value_fn(course_data)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return additional attributes."""
        course_data = self._course_data
        if not course_data or not self.entity_description.attributes_fn:
            return None
        return self.entity_description.attributes_fn(course_data)

    @property
    def available(self) -> bool:
        """Return if entity is available."""
        return super().available and self._course_data is not None
