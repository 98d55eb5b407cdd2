"""Session and extraction engine for Home Access Center portals."""
from .cache import ResultCache
from .client import HACScraper
from .config import HACConfig
from .cookies import CookieJar
from .exceptions import HACAuthError, HACConnectionError, HACError
from .models import (
    Assignment,
    AssignmentCategory,
    CourseDetail,
    CourseSummaries,
    CourseSummary,
    StudentIdentity,
)
from .transport import AiohttpTransport, TransportResponse

__version__ = "1.0.0"
__all__ = [
    "AiohttpTransport",
    "Assignment",
    "AssignmentCategory",
    "CookieJar",
    "CourseDetail",
    "CourseSummaries",
    "CourseSummary",
    "HACAuthError",
    "HACConfig",
    "HACConnectionError",
    "HACError",
    "HACScraper",
    "ResultCache",
    "StudentIdentity",
    "TransportResponse",
]
