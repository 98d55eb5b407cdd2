"""Constants for the HAC session client."""

# Portal paths (relative to the school's HAC base URL)
LOGIN_PATH = "HomeAccess/Account/LogOn"
WEEK_VIEW_PATH = "HomeAccess/Home/WeekView"
ASSIGNMENTS_POPUP_PATH = "HomeAccess/Content/Student/AssignmentsFromRCPopUp.aspx"

# Login form
TOKEN_FIELD = "__RequestVerificationToken"
USERNAME_FIELD = "LogOnDetails.UserName"
PASSWORD_FIELD = "LogOnDetails.Password"
VERIFICATION_OPTION = "UsernamePassword"

# Defaults
DEFAULT_DATABASE = "10"
DEFAULT_MARKING_PERIOD = "1"
DEFAULT_TIMEOUT = 30
DEFAULT_CACHE_TTL = 300
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)

# Result cache operation keys
OP_IDENTITY = "identity"
OP_COURSES = "courses"
OP_COURSE_DETAIL = "course_detail"

# Error markers returned to callers
ERROR_LOGIN_FAILED = "Login failed"
ERROR_CLASS_NOT_FOUND = "Class not found"
