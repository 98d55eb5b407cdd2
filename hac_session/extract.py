"""Extraction of HAC entities from server rendered pages.

HAC is sold to many districts and its markup differs between skins and
versions. Every lookup here is an ordered list of candidates: the first one
that matches wins, and anything that cannot be found degrades to an empty
field instead of raising.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
import logging
import re

from bs4 import BeautifulSoup, Tag

from .const import TOKEN_FIELD
from .models import Assignment, AssignmentCategory, CourseDetail, CourseSummary

_LOGGER = logging.getLogger(__name__)

CLASS_ID_PATTERN = re.compile(r"ViewClassPopUp\((\d+)")
SECTION_KEY_PATTERN = re.compile(r"ViewAssignmentsRCPopUp\((\d+)")
COURSE_CODE_PATTERN = re.compile(r"\(([A-Z0-9]+)")
PERIOD_PATTERN = re.compile(r"Per:\s*([^\s]+)")
NUMBER_PATTERN = re.compile(r"[\d.]+")
PERCENT_PATTERN = re.compile(r"([\d.]+)%")
_LEADING_FLOAT = re.compile(r"\d+(?:\.\d*)?|\.\d+")

# Header cells some skins render as td instead of th
HEADER_LABELS = {"Class", "Course"}

IDENTITY_SELECTORS = (
    ".sg-banner-menu-element.sg-menu-element-identity span",
    "#plnMain_lblStudentName",
    ".StudentName",
    "#lblStudentName",
    'span[id*="StudentName"]',
)

CATEGORY_TABLE_SELECTORS = (
    "#plnMain_rptAssigmnetsByCourse_dgCourseCategories_0",
    'table[id*="dgCourseCategories"]',
)

ASSIGNMENT_ROW_SELECTOR = "table.sg-asp-table tr.sg-asp-table-data-row"
DATA_ROW_SELECTOR = "tr.sg-asp-table-data-row"
MIN_ASSIGNMENT_CELLS = 11
MIN_CATEGORY_CELLS = 4


def parse_html(html: str) -> BeautifulSoup:
    """Parse a portal page."""
    return BeautifulSoup(html, "lxml")


def normalize_class_name(name: str) -> str:
    """Collapse whitespace runs so names compare equal across layouts."""
    return " ".join(name.split())


def parse_number(text: str) -> float | None:
    """Return the first number in text, or None when there is none.

    The first run of digits and dots is taken and its leading numeric part
    parsed, so "94.2 (A)" gives 94.2 and "." gives None.
    """
    match = NUMBER_PATTERN.search(text or "")
    if not match:
        return None
    leading = _LEADING_FLOAT.match(match.group())
    return float(leading.group()) if leading else None


def _text(element: Tag | None) -> str:
    return element.get_text().strip() if element is not None else ""


def _search(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text or "")
    return match.group(1) if match else None


def _cells(row: Tag) -> list[Tag]:
    return row.find_all("td", recursive=False)


def extract_token(soup: BeautifulSoup) -> str | None:
    """Return the anti-forgery token of the login form."""
    token_input = soup.find("input", {"name": TOKEN_FIELD})
    if token_input is None:
        return None
    return token_input.get("value") or None


def extract_student_name(soup: BeautifulSoup) -> str:
    """Return the student's name from the page banner."""
    for selector in IDENTITY_SELECTORS:
        name = _text(soup.select_one(selector))
        if name:
            _LOGGER.debug("Found student name with selector %s", selector)
            return name

    _LOGGER.debug("Could not find student name on page")
    return ""


def _parse_homeview_row(cells: list[Tag]) -> CourseSummary | None:
    """Parse a row of the WeekView class table."""
    first_cell, second_cell = cells[0], cells[1]

    class_link = first_cell.select_one("a.sg-font-larger")
    class_name = _text(class_link)
    if not class_name or class_name in HEADER_LABELS:
        return None

    class_id = _search(CLASS_ID_PATTERN, class_link.get("onclick", ""))

    course_code = ""
    period = ""
    for span in first_cell.find_all("span"):
        span_text = span.get_text().strip()
        if not course_code:
            course_code = _search(COURSE_CODE_PATTERN, span_text) or ""
        if not period:
            period = _search(PERIOD_PATTERN, span_text) or ""

    teacher_link = first_cell.select_one("a#staffName") or first_cell.select_one(
        'a[href^="mailto:"]'
    )
    teacher_email = ""
    if teacher_link is not None:
        teacher_email = teacher_link.get("href", "").replace("mailto:", "")

    grade_text = _text(second_cell.select_one("a.sg-font-larger-average"))

    return CourseSummary(
        class_name=class_name,
        class_id=class_id,
        course_code=course_code,
        teacher_name=_text(teacher_link),
        teacher_email=teacher_email,
        period=period,
        grade_display=grade_text,
        average=parse_number(grade_text),
    )


def _parse_positional_row(cells: list[Tag]) -> CourseSummary | None:
    """Parse a row of the older Classes table: name, code, period, teacher, grade."""
    if len(cells) < 3:
        return None

    texts = [_text(cell) for cell in cells[:5]]
    texts += [""] * (5 - len(texts))
    class_name, course_code, period, teacher, grade_text = texts

    if not class_name or class_name in HEADER_LABELS:
        return None

    return CourseSummary(
        class_name=class_name,
        course_code=course_code,
        teacher_name=teacher,
        period=period,
        grade_display=grade_text,
        average=parse_number(grade_text),
    )


@dataclass(frozen=True)
class ListingCandidate:
    """A table selector and the parser that understands its rows."""

    selector: str
    parse_row: Callable[[list[Tag]], CourseSummary | None]


# Ordered by preference; new skins are added here
LISTING_CANDIDATES: tuple[ListingCandidate, ...] = (
    ListingCandidate(".sg-homeview-table", _parse_homeview_row),
    ListingCandidate("#plnMain_dgClassesMarks", _parse_positional_row),
    ListingCandidate("table.InfoTable", _parse_positional_row),
)


def _data_rows(table: Tag) -> Iterator[tuple[Tag, list[Tag]]]:
    """Yield (row, cells) for every data row that belongs to this table."""
    for row in table.find_all("tr"):
        if table.name == "table" and row.find_parent("table") is not table:
            continue
        if row.find("th") is not None:
            continue
        cells = _cells(row)
        if len(cells) < 2:
            continue
        yield row, cells


def _listing_rows(soup: BeautifulSoup) -> list[tuple[Tag, CourseSummary]]:
    """Return parsed rows of the first listing candidate that has any.

    Rows of every table matched by the winning selector are concatenated.
    """
    for candidate in LISTING_CANDIDATES:
        parsed = []
        for table in soup.select(candidate.selector):
            for row, cells in _data_rows(table):
                summary = candidate.parse_row(cells)
                if summary is not None:
                    parsed.append((row, summary))

        if parsed:
            _LOGGER.debug(
                "Listing matched %s with %d rows", candidate.selector, len(parsed)
            )
            return parsed

    _LOGGER.debug("No listing table matched any known layout")
    return []


def extract_course_summaries(soup: BeautifulSoup) -> list[CourseSummary]:
    """Return the course listing in page order, first occurrence of each class."""
    courses = []
    seen = set()

    for _row, summary in _listing_rows(soup):
        if summary.key in seen:
            continue
        seen.add(summary.key)
        courses.append(summary)

    return courses


def _section_key_from_row(row: Tag) -> str | None:
    grade_link = row.select_one("a.sg-font-larger-average")
    if grade_link is None:
        return None
    return _search(SECTION_KEY_PATTERN, grade_link.get("href", "")) or _search(
        SECTION_KEY_PATTERN, grade_link.get("onclick", "")
    )


def find_course_row(
    soup: BeautifulSoup, class_name: str
) -> tuple[CourseSummary, str | None] | None:
    """Find the listing row for a class and the section key of its grade link.

    Rows with the name but no section key are skipped in favour of a later
    row that has one. Returns ``(summary, None)`` when only keyless rows
    match, and None when no row carries that class name.
    """
    wanted = normalize_class_name(class_name)
    keyless = None

    for row, summary in _listing_rows(soup):
        if normalize_class_name(summary.class_name) != wanted:
            continue

        section_key = _section_key_from_row(row)
        if section_key is None:
            _LOGGER.debug("Row for %s has no section key in its grade link", wanted)
            if keyless is None:
                keyless = summary
            continue

        return summary, section_key

    if keyless is not None:
        return keyless, None
    return None


def extract_assignments(soup: BeautifulSoup) -> list[Assignment]:
    """Map every assignment row with enough cells to an Assignment."""
    assignments = []

    for row in soup.select(ASSIGNMENT_ROW_SELECTOR):
        cells = _cells(row)
        if len(cells) < MIN_ASSIGNMENT_CELLS:
            continue

        texts = [_text(cell) for cell in cells]
        name = _text(cells[3].find("a")) or texts[3]

        assignments.append(
            Assignment(
                date_due=texts[0],
                date_assigned=texts[1],
                turned_in_date=texts[2],
                name=name,
                category=texts[4],
                score=texts[5],
                weight=texts[6],
                weighted_score=texts[7],
                total_points=texts[8],
                weighted_total_points=texts[9],
                percentage=texts[10],
            )
        )

    return assignments


def extract_categories(soup: BeautifulSoup) -> list[AssignmentCategory]:
    """Map category rows, skipping the bold totals row."""
    for selector in CATEGORY_TABLE_SELECTORS:
        tables = soup.select(selector)
        if not tables:
            continue

        categories = []
        for table in tables:
            for row in table.select(DATA_ROW_SELECTOR):
                cells = _cells(row)
                if len(cells) < MIN_CATEGORY_CELLS or row.find("b") is not None:
                    continue
                categories.append(
                    AssignmentCategory(
                        name=_text(cells[0]),
                        earned_points=_text(cells[1]),
                        max_points=_text(cells[2]),
                        percentage=_text(cells[3]),
                    )
                )
        return categories

    return []


def extract_course_detail(
    soup: BeautifulSoup, class_name: str, marking_period: str
) -> CourseDetail:
    """Build a CourseDetail from an assignments popup page."""
    average_text = _search(PERCENT_PATTERN, _text(soup.select_one(".headeravg")))

    detail = CourseDetail(
        class_name=_text(soup.select_one(".asmt_link")) or class_name,
        current_average=parse_number(average_text) if average_text else None,
        last_updated=_text(soup.select_one(".lastupdated")),
        assignments=extract_assignments(soup),
        categories=extract_categories(soup),
        marking_period=marking_period,
    )

    _LOGGER.debug(
        "Parsed %s: %d assignments, %d categories",
        detail.class_name,
        len(detail.assignments),
        len(detail.categories),
    )
    return detail
