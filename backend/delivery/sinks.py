"""
Delivery sinks.

A sink receives finished content plus a file name and MIME type and makes
it reach the user. Sinks don't retry and don't keep artifacts beyond the
call that produced them.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from fastapi import Response
from typing_extensions import Protocol

logger = logging.getLogger(__name__)


class DeliverySink(Protocol):
    def deliver(self, content: str, file_name: str, mime_type: str) -> None:
        ...


class DownloadSink:
    """
    Turns a delivered artifact into an attachment download.

    Create one per request; after deliver() the `response` attribute holds
    the FastAPI response to return.
    """

    def __init__(self) -> None:
        self.response: Optional[Response] = None

    def deliver(self, content: str, file_name: str, mime_type: str) -> None:
        self.response = Response(
            content=content.encode("utf-8"),
            media_type=mime_type,
            headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
        )


class DirectorySink:
    """Writes each delivered artifact into a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def deliver(self, content: str, file_name: str, mime_type: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / file_name
        path.write_text(content, encoding="utf-8")
        logger.info("Wrote %s (%s) to %s", file_name, mime_type, path)
