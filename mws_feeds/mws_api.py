"""MWS API client: request signing, transport and mock replay."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import quote, urlparse
from xml.parsers.expat import ExpatError

import requests
import xmltodict

logger = logging.getLogger(__name__)

FEEDS_VERSION = "2009-01-01"


@dataclass(frozen=True)
class ApiResponse:
    code: int
    body: bytes


def _encode(value: str) -> str:
    return quote(str(value), safe="-_.~")


def canonical_query(params: Dict[str, str]) -> str:
    return "&".join(f"{_encode(key)}={_encode(params[key])}" for key in sorted(params))


def sign_query(secret_key: str, host: str, path: str, params: Dict[str, str]) -> str:
    string_to_sign = "\n".join(["POST", host.lower(), path or "/", canonical_query(params)])
    digest = hmac.new(secret_key.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class MWSClient:
    """Signs and sends form-encoded POST requests, or replays mock files in mock mode."""

    def __init__(
        self,
        merchant_id: str = "",
        access_key_id: str = "",
        secret_key: str = "",
        service_url: str = "https://mws.amazonservices.com",
        auth_token: str = "",
        version: str = FEEDS_VERSION,
        mock_mode: bool = False,
        mock_files: Optional[Sequence[Union[str, Path]]] = None,
        mock_dir: Union[str, Path] = "mock",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.merchant_id = merchant_id
        self.access_key_id = access_key_id
        self.secret_key = secret_key
        self.service_url = service_url.rstrip("/") + "/"
        self.auth_token = auth_token
        self.version = version
        self.mock_mode = mock_mode
        self.mock_files: List[Path] = [Path(f) for f in (mock_files or [])]
        self.mock_dir = Path(mock_dir)
        self.mock_index = 0
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_query(self, params: Dict[str, str]) -> Dict[str, str]:
        query = dict(params)
        query["AWSAccessKeyId"] = self.access_key_id
        query["Merchant"] = self.merchant_id
        if self.auth_token:
            query["MWSAuthToken"] = self.auth_token
        query["SignatureMethod"] = "HmacSHA256"
        query["SignatureVersion"] = "2"
        query["Timestamp"] = _timestamp()
        query["Version"] = self.version

        parsed = urlparse(self.service_url)
        query["Signature"] = sign_query(self.secret_key, parsed.netloc, parsed.path, query)
        return query

    def send_request(self, params: Dict[str, str]) -> Optional[ApiResponse]:
        query = self.build_query(params)
        try:
            response = self.session.post(
                self.service_url,
                data=canonical_query(query),
                headers={"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error("MWS request timeout for %s", params.get("Action"))
            return None
        except requests.exceptions.RequestException as exc:
            logger.error("MWS request failed for %s: %s", params.get("Action"), exc)
            return None
        return ApiResponse(code=response.status_code, body=response.content)

    def check_response(self, response: Optional[ApiResponse]) -> bool:
        if response is None:
            logger.warning("No response received")
            return False
        if response.code == 200:
            return True

        code, message = _error_details(response.body)
        if code or message:
            logger.warning("Bad response (%s): %s - %s", response.code, code, message)
        else:
            logger.warning("Bad response (%s)", response.code)
        return False

    def fetch_mock_file(self) -> Optional[bytes]:
        if not self.mock_files:
            logger.error("Mock mode is enabled but no mock files are configured")
            return None

        if self.mock_index >= len(self.mock_files):
            logger.error("Attempted to retrieve mock file #%s, which does not exist", self.mock_index)
            self.reset_mock()
            return None

        path = self.mock_files[self.mock_index]
        if not path.is_absolute():
            path = self.mock_dir / path
        self.mock_index += 1

        try:
            body = path.read_bytes()
        except OSError as exc:
            logger.error("Unable to read mock file %s: %s", path, exc)
            return None
        logger.info("Fetched mock file %s", path)
        return body

    def reset_mock(self) -> None:
        self.mock_index = 0


def _error_details(body: bytes) -> Tuple[Optional[str], Optional[str]]:
    try:
        parsed = xmltodict.parse(body)
    except (ExpatError, ValueError):
        return None, None

    error = (parsed or {}).get("ErrorResponse", {}) or {}
    error = error.get("Error", {}) if isinstance(error, dict) else {}
    if isinstance(error, list):
        error = error[0] if error else {}
    if not isinstance(error, dict):
        return None, None
    return error.get("Code"), error.get("Message")
