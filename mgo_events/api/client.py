"""
Client for the streaming scrape endpoint.

The endpoint sends one JSON record per line and flushes each record as soon
as it exists, so a network chunk can end in the middle of a record.
StreamDecoder keeps that trailing partial line buffered until the rest arrives.
"""

import codecs
import json
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

import requests

from mgo_events.core.interfaces import ScraperConnectionError
from mgo_events.core.models import FinalRecord, StepStatus
from mgo_events.utils import get_logger

logger = get_logger("client")

DEFAULT_BASE_URL = "http://localhost:8080"
SCRAPE_PATH = "/api/scrape-events"


class StreamDecoder:
    """Incremental decoder for newline-delimited JSON."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Buffered text of an incomplete trailing record."""
        return self._buffer

    def feed(self, chunk: Union[bytes, str]) -> List[dict]:
        """
        Add a chunk and return every record it completed.

        Blank lines are skipped; lines that are not valid JSON objects are
        logged and skipped.
        """
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk

        *lines, self._buffer = self._buffer.split("\n")
        return [record for record in map(self._parse, lines) if record is not None]

    def flush(self) -> List[dict]:
        """Decode whatever is left once the stream has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        record = self._parse(remaining)
        return [record] if record is not None else []

    @staticmethod
    def _parse(line: str) -> Optional[dict]:
        line = line.strip()
        if not line:
            return None
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON record: {e}")
            return None
        if not isinstance(record, dict):
            logger.error(f"Ignoring non-object record: {line[:80]}")
            return None
        return record


@dataclass
class ScrapeResult:
    """Outcome of one streamed scrape, as seen by a client."""
    final: FinalRecord
    progress: int = 0
    methods: Tuple[StepStatus, ...] = field(default_factory=tuple)


class ScrapeEventsClient:
    """
    Client for ``GET /api/scrape-events``.

    Usage:
        client = ScrapeEventsClient("http://localhost:8080")
        for record in client.stream():
            print(record["type"], record.get("progress"))
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        connect_timeout: float = 10.0,
        read_timeout: float = 120.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = (connect_timeout, read_timeout)

    def stream(self) -> Iterator[dict]:
        """
        Trigger a scrape and yield each record as it arrives.

        Raises:
            ScraperConnectionError: If the request fails
        """
        url = f"{self.base_url}{SCRAPE_PATH}"
        decoder = StreamDecoder()
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=None):
                    yield from decoder.feed(chunk)
        except requests.exceptions.RequestException as e:
            raise ScraperConnectionError(f"Scrape request to {url} failed: {e}") from e
        yield from decoder.flush()

    def fetch(self) -> ScrapeResult:
        """
        Trigger a scrape and wait for its final record.

        Raises:
            ScraperConnectionError: If the request fails or the stream ends
                without a final record
        """
        progress = 0
        methods: Tuple[StepStatus, ...] = ()

        for record in self.stream():
            if record.get("type") == "progress":
                progress = int(record.get("progress", progress))
                methods = tuple(StepStatus.from_dict(item) for item in record.get("methods", []))
            elif record.get("type") == "final":
                return ScrapeResult(final=FinalRecord.from_dict(record), progress=progress, methods=methods)

        raise ScraperConnectionError("Stream ended without a final record")
