"""Retrieval of feed submission processing results."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from .config import ThrottleConfig
from .mws_api import MWSClient
from .report import ResultSummary, parse_processing_report

logger = logging.getLogger(__name__)

ACTION = "GetFeedSubmissionResult"


class FailureReason(str, Enum):
    INVALID_ID = "invalid_id"
    MISSING_ID = "missing_id"
    REQUEST_FAILED = "request_failed"
    MOCK_UNAVAILABLE = "mock_unavailable"
    NO_FEED = "no_feed"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class Outcome:
    ok: bool
    reason: Optional[FailureReason] = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.ok


OK = Outcome(ok=True)


def _failure(reason: FailureReason, detail: str = "") -> Outcome:
    return Outcome(ok=False, reason=reason, detail=detail)


def _normalize_feed_id(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value) if value > 0 else None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isascii() and stripped.isdigit() and int(stripped) > 0:
            return stripped
    return None


class FeedResultFetcher:
    """Fetches the processing report of a submitted feed.

    The raw report is kept exactly as received so it can be saved with
    ``save_feed``; ``get_result`` parses it again on every call.
    """

    def __init__(
        self,
        client: MWSClient,
        feed_id: Optional[Union[int, str]] = None,
        throttle: Optional[ThrottleConfig] = None,
    ) -> None:
        self.client = client
        self.throttle = throttle or ThrottleConfig()
        self._feed_id: Optional[str] = None
        self._raw_feed: Optional[bytes] = None
        if feed_id is not None:
            self.set_feed_id(feed_id)

    @property
    def feed_id(self) -> Optional[str]:
        return self._feed_id

    @property
    def mock_mode(self) -> bool:
        return self.client.mock_mode

    def set_feed_id(self, value: Union[int, str]) -> Outcome:
        normalized = _normalize_feed_id(value)
        if normalized is None:
            return _failure(FailureReason.INVALID_ID, f"Feed submission ID must be numeric: {value!r}")
        self._feed_id = normalized
        return OK

    def fetch_result(self) -> Outcome:
        if self._feed_id is None:
            logger.warning("Feed Submission ID must be set in order to fetch it!")
            return _failure(FailureReason.MISSING_ID, "Feed submission ID is not set")

        if self.client.mock_mode:
            body = self.client.fetch_mock_file()
            if body is None:
                return _failure(FailureReason.MOCK_UNAVAILABLE, "No mock response available")
            self._raw_feed = body
            return OK

        response = self.client.send_request({"Action": ACTION, "FeedSubmissionId": self._feed_id})
        if not self.client.check_response(response):
            detail = f"HTTP {response.code}" if response is not None else "no response"
            return _failure(FailureReason.REQUEST_FAILED, detail)
        self._raw_feed = response.body
        return OK

    def get_raw_feed(self) -> Optional[bytes]:
        return self._raw_feed

    def get_result(self) -> Optional[ResultSummary]:
        if not self._raw_feed:
            return None
        return parse_processing_report(self._raw_feed)

    def save_feed(self, path: Union[str, Path]) -> Outcome:
        if self._raw_feed is None:
            return _failure(FailureReason.NO_FEED, "No feed has been fetched")

        try:
            with open(path, "wb") as handle:
                handle.write(self._raw_feed)
        except OSError as exc:
            logger.critical("Unable to save feed #%s at %s: %s", self._feed_id, path, exc)
            return _failure(FailureReason.IO_ERROR, str(exc))

        logger.info("Successfully saved feed #%s at %s", self._feed_id, path)
        return OK
