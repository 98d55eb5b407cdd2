"""Fake transport and portal page builders shared by the tests."""
from __future__ import annotations

from dataclasses import dataclass, field

from hac_session.exceptions import HACConnectionError
from hac_session.transport import TransportResponse

BASE_URL = "https://hac.example.org"
LOGIN_URL = f"{BASE_URL}/HomeAccess/Account/LogOn"
WEEK_VIEW_URL = f"{BASE_URL}/HomeAccess/Home/WeekView"


@dataclass
class Request:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] | None = None
    max_redirects: int = 0


class FakeTransport:
    """Replays scripted responses in order and records every request."""

    def __init__(self, responses: list[TransportResponse | Exception]) -> None:
        self.responses = list(responses)
        self.requests: list[Request] = []

    async def get(self, url, headers=None, max_redirects=5):
        self.requests.append(Request("GET", url, dict(headers or {}), None, max_redirects))
        return self._next(url)

    async def post(self, url, data, headers=None, max_redirects=0):
        self.requests.append(Request("POST", url, dict(headers or {}), dict(data), max_redirects))
        return self._next(url)

    def _next(self, url: str) -> TransportResponse:
        if not self.responses:
            raise AssertionError(f"Unexpected request to {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def ok(text: str = "", url: str = WEEK_VIEW_URL, cookies: list[str] | None = None) -> TransportResponse:
    return TransportResponse(status=200, url=url, text=text, set_cookies=cookies or [])


def login_page(token: str | None = "abc123") -> str:
    token_input = (
        f'<input name="__RequestVerificationToken" type="hidden" value="{token}" />'
        if token
        else ""
    )
    return f"""
<html><body>
  <form action="/HomeAccess/Account/LogOn" method="post">
    {token_input}
    <input name="LogOnDetails.UserName" type="text" />
    <input name="LogOnDetails.Password" type="password" />
  </form>
</body></html>
"""


def class_row(
    class_name: str = "AP Biology",
    class_id: str | None = "4521",
    grade: str = "94.2",
    section_key: str = "778",
    course_code: str = "APBIO01",
    period: str = "3",
    teacher: str = "Smith, Jane",
    email: str = "jane.smith@example.org",
) -> str:
    onclick = f' onclick="ViewClassPopUp({class_id}, 1, 0)"' if class_id else ""
    return f"""
  <tr>
    <td>
      <a class="sg-font-larger" href="#"{onclick}>{class_name}</a>
      <span>({course_code} - 1)</span>
      <span>Per: {period}</span>
      <a id="staffName" href="mailto:{email}">{teacher}</a>
    </td>
    <td>
      <a class="sg-font-larger-average" href="javascript:ViewAssignmentsRCPopUp({section_key}, 1, 1)">{grade}</a>
    </td>
  </tr>"""


def week_view(*rows: str, tables: int = 1, student: str = "Doe, John") -> str:
    table = f"""
<table class="sg-homeview-table">
  <tr><th>Class</th><th>Average</th></tr>
  {''.join(rows)}
</table>"""
    return f"""
<html><body>
  <div class="sg-banner-menu-element sg-menu-element-identity"><span>{student}</span></div>
  {table * tables}
</body></html>
"""


def assignment_row(cells: list[str]) -> str:
    tds = "".join(f"<td>{cell}</td>" for cell in cells)
    return f'<tr class="sg-asp-table-data-row">{tds}</tr>'


ASSIGNMENT_CELLS = [
    "10/01/2026",
    "09/28/2026",
    "09/30/2026",
    '<a href="#">Cell Structure Lab</a>',
    "Major",
    "45.00",
    "1.00",
    "45.00",
    "50.00",
    "50.00",
    "90.00%",
]


def assignments_page(*rows: str) -> str:
    return f"""
<html><body>
  <a class="asmt_link">AP Biology</a>
  <span class="headeravg">Average: 94.20%</span>
  <span class="lastupdated">Last Updated: 10/15/2026</span>
  <table class="sg-asp-table">
    <tr class="sg-asp-table-header-row"><td>Date Due</td><td>Assignment</td></tr>
    {''.join(rows)}
  </table>
  <table id="plnMain_rptAssigmnetsByCourse_dgCourseCategories_0" class="sg-asp-table">
    <tr class="sg-asp-table-header-row"><td>Category</td></tr>
    <tr class="sg-asp-table-data-row"><td>Major</td><td>180.00</td><td>200.00</td><td>90.00%</td></tr>
    <tr class="sg-asp-table-data-row"><td>Minor</td><td>95.00</td><td>100.00</td><td>95.00%</td></tr>
    <tr class="sg-asp-table-data-row"><td><b>Totals</b></td><td>275.00</td><td>300.00</td><td>91.67%</td></tr>
  </table>
</body></html>
"""


def login_responses(token: str | None = "abc123") -> list[TransportResponse]:
    """Login page, credential POST answered with a redirect, redirect target."""
    return [
        ok(
            login_page(token),
            url=LOGIN_URL,
            cookies=[
                "ASP.NET_SessionId=s1; path=/; HttpOnly",
                "__RequestVerificationToken=c1; path=/; HttpOnly",
            ],
        ),
        TransportResponse(
            status=302,
            url=LOGIN_URL,
            set_cookies=[".AuthCookie=a1; path=/; HttpOnly"],
            location="/HomeAccess/Home/WeekView",
        ),
        ok(week_view(class_row())),
    ]


def connection_error() -> HACConnectionError:
    return HACConnectionError("Timed out requesting portal")
