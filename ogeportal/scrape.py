from __future__ import annotations

from typing import Dict, Optional

import requests

from ogeportal.config import Settings
from ogeportal.logger import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Paths & URLs
# ---------------------------------------------------------------------------

GRADES_PATH = "/stylesheets/etu/bilanEtu.xhtml"
SCHEDULE_PATH = "/stylesheets/etu/planningEtu.xhtml"

SESSION_COOKIE_NAME = "JSESSIONID"


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class Portal:
    """
    Thin HTTP layer over an already authenticated `requests.Session`.

    Every call is one blocking round trip. HTTP errors are raised by
    `raise_for_status()` and network errors propagate from `requests`.
    """

    def __init__(
        self,
        session: requests.Session,
        base_url: str,
        timeout: float = 30.0,
    ) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "Portal":
        session = session or requests.Session()
        session.headers.update({"User-Agent": settings.user_agent})
        if settings.session_cookie:
            session.cookies.set(SESSION_COOKIE_NAME, settings.session_cookie)
        return cls(session, settings.base_url, timeout=settings.timeout)

    @property
    def grades_url(self) -> str:
        return self.base_url + GRADES_PATH

    @property
    def schedule_url(self) -> str:
        return self.base_url + SCHEDULE_PATH

    def navigate(self, url: str) -> str:
        """GET a page and return its body."""
        log.debug("GET %s", url)
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.text

    def post_form(self, url: str, data: Dict[str, str]) -> str:
        """POST an url-encoded form and return the response body."""
        log.debug("POST %s (%s)", url, ", ".join(data))
        resp = self.session.post(
            url,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.text
