from __future__ import annotations

import logging
from typing import Protocol

import requests

from ..core.exceptions import ServiceUnavailableError
from .model import FaceMatchResult

logger = logging.getLogger(__name__)


class FaceMatcher(Protocol):
    def compare(self, reference_url: str, captured_url: str) -> FaceMatchResult:
        raise NotImplementedError


class HttpFaceMatcher(FaceMatcher):
    """Client of the face comparison API (`POST /api/compare-faces`)."""

    def __init__(self, base_url: str, *, timeout: float = 20.0, session: requests.Session | None = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._http = session or requests.Session()

    def compare(self, reference_url: str, captured_url: str) -> FaceMatchResult:
        url = f"{self._base_url}/api/compare-faces"
        try:
            r = self._http.post(
                url,
                json={"image1_url": reference_url, "image2_url": captured_url},
                timeout=self._timeout,
            )
            r.raise_for_status()
        except requests.HTTPError as e:
            detail = _error_detail(e.response)
            logger.warning(
                "Face API %s failed: %s %s", url, getattr(e.response, "status_code", ""), detail or ""
            )
            raise ServiceUnavailableError(detail or "Xác thực khuôn mặt thất bại") from e
        except requests.RequestException as e:
            logger.warning("Face API %s unreachable: %s", url, e)
            raise ServiceUnavailableError("Không thể kết nối dịch vụ xác thực khuôn mặt") from e

        try:
            data = r.json()
        except ValueError as e:
            raise ServiceUnavailableError("Phản hồi không hợp lệ từ dịch vụ xác thực khuôn mặt") from e
        return FaceMatchResult(
            matched=bool(data.get("verified", False)),
            score=float(data.get("similarity") or 0.0),
        )


def _error_detail(response) -> str | None:
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return None
