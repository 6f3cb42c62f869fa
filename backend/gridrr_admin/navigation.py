from __future__ import annotations
from dataclasses import dataclass
from fastapi.responses import JSONResponse, RedirectResponse, Response

NAV_ITEMS = [
    {"name": "Dashboard", "href": "/dashboard"},
    {"name": "Upload Design", "href": "/upload/design"},
    {"name": "Upload Website", "href": "/upload/website"},
    {"name": "Submissions", "href": "/submissions"},
]


@dataclass
class NavigationRequest:
    path: str
    delay: float = 0.0


class Navigator:
    """Collects the navigation a handler asks for during one request."""

    def __init__(self) -> None:
        self.pending: NavigationRequest | None = None

    def push(self, path: str, delay: float = 0.0) -> None:
        self.pending = NavigationRequest(path=path, delay=delay)


def respond(navigator: Navigator, content=None, status_code: int = 200) -> Response:
    nav = navigator.pending
    if nav is not None and nav.delay <= 0:
        return RedirectResponse(nav.path, status_code=303)
    response = JSONResponse(content=content, status_code=status_code)
    if nav is not None:
        response.headers["Refresh"] = f"{nav.delay:g}; url={nav.path}"
    return response
