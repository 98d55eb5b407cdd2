"""Constants for the HAC Grades integration."""
from datetime import timedelta

DOMAIN = "hac_grades"

# Configuration
CONF_SCHOOL_URL = "school_url"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_DATABASE = "database"

# Defaults
DEFAULT_SCAN_INTERVAL = timedelta(hours=6)
DEFAULT_TIMEOUT = 60
DEFAULT_DATABASE = "10"

# Data keys
DATA_COORDINATOR = "coordinator"
DATA_IDENTITY = "identity"
DATA_COURSES = "courses"
DATA_LAST_UPDATED = "last_updated"

# Scan interval choices in hours
SCAN_INTERVAL_OPTIONS = {
    1: "1 hour",
    2: "2 hours",
    3: "3 hours",
    4: "4 hours",
    6: "6 hours (recommended)",
    8: "8 hours",
    12: "12 hours",
    24: "24 hours",
}
