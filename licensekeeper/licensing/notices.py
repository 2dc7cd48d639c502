"""
Admin notices.

Notices carry HTML fragments.  Callers escape any untrusted text before it is
handed to the renderer.
"""

from dataclasses import dataclass
from typing import List

NOTICE_INFO = "info"
NOTICE_ERROR = "error"


@dataclass
class Notice:
    """A single admin notice."""

    level: str
    message: str
    css_class: str = ""
    autop: bool = True

    def render(self) -> str:
        """Render the notice as an admin notice block."""
        classes = f"notice notice-{self.level}"
        if self.css_class:
            classes = f"{classes} {self.css_class}"
        body = f"<p>{self.message}</p>" if self.autop else self.message
        return f'<div class="{classes}">{body}</div>'


class NoticeRenderer:
    """Collects notices in the order they are added."""

    def __init__(self):
        self.notices: List[Notice] = []

    def info(self, message: str, css_class: str = "", autop: bool = True) -> None:
        self.notices.append(Notice(NOTICE_INFO, message, css_class, autop))

    def error(self, message: str, css_class: str = "", autop: bool = True) -> None:
        self.notices.append(Notice(NOTICE_ERROR, message, css_class, autop))

    def render_html(self) -> str:
        return "\n".join(notice.render() for notice in self.notices)
