"""Feed processing report parsing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from xml.parsers.expat import ExpatError

import xmltodict

logger = logging.getLogger(__name__)


class ResultCode(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ResultSummary:
    code: ResultCode
    messages: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "messages": list(self.messages)}


def _extract_text(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("#text", "") or "")
    if value is None:
        return ""
    return str(value)


def _extract_count(value: Any) -> int:
    text = _extract_text(value).strip()
    try:
        return int(text) if text else 0
    except ValueError:
        return 0


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value]


def _find_message(document: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    # The message is either the document root or a child of an envelope root.
    if "Message" in document:
        message = document["Message"]
    else:
        root = next(iter(document.values()), None)
        message = root.get("Message") if isinstance(root, dict) else None

    if isinstance(message, list):
        message = message[0] if message else None
    return message if isinstance(message, dict) else None


def _result_descriptions(results: Any) -> List[str]:
    descriptions: List[str] = []
    for entry in _as_list(results):
        description = entry.get("ResultDescription") if isinstance(entry, dict) else None
        descriptions.append(_extract_text(description))
    return descriptions


def parse_processing_report(raw: Union[bytes, str]) -> Optional[ResultSummary]:
    """Derive a success/error/warning summary from a processing report.

    The three checks run in a fixed order and each one that matches overwrites
    the code and messages of the previous ones, so a report with both errors
    and warnings is reported as a warning.
    """
    if not raw:
        return None
    try:
        document = xmltodict.parse(raw)
    except (ExpatError, ValueError) as exc:
        logger.debug("Processing report is not valid XML: %s", exc)
        return None

    message = _find_message(document or {})
    if message is None:
        return None
    report = message.get("ProcessingReport")
    if not isinstance(report, dict):
        return None
    summary = report.get("ProcessingSummary")
    if not isinstance(summary, dict):
        return None

    code: Optional[ResultCode] = None
    messages: List[str] = []

    if _extract_count(summary.get("MessagesProcessed")) > 0 and _extract_count(summary.get("MessagesSuccessful")) > 0:
        code = ResultCode.SUCCESS
        messages.append("Success.")

    if _extract_count(summary.get("MessagesWithError")) > 0:
        code = ResultCode.ERROR
        if "Result" in report:
            messages = _result_descriptions(report["Result"])

    if _extract_count(summary.get("MessagesWithWarning")) > 0:
        code = ResultCode.WARNING
        if "Result" in report:
            messages = _result_descriptions(report["Result"])

    if code is None:
        return None
    return ResultSummary(code=code, messages=messages)
