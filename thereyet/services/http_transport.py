"""외부 HTTP API 호출 전송 계층."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import requests

from thereyet.core.errors import ErrorKind, TransportError
from thereyet.core.logger import get_logger
from thereyet.core.timeout_policy import to_requests_timeout

logger = get_logger(__name__)


def _parse_json_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class HttpTransport:
    """`requests` 세션을 워커 스레드에서 실행하는 JSON GET 전송기.

    공급자 이용 정책에 따라 모든 요청에 식별용 `User-Agent`를 붙입니다.
    `requests.Session`은 스레드 안전하지 않으므로 워커 스레드에서 요청마다 새로 엽니다.
    실패는 `TransportError`로 분류해 재시도 엔진이 판단하도록 합니다.
    """

    def __init__(
        self,
        *,
        user_agent: str,
        timeout_seconds: int = 10,
        referer: str | None = None,
        accept_language: str | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        if not user_agent or not user_agent.strip():
            raise ValueError("An identifying User-Agent is required by the provider usage policy.")
        self._session_factory = session_factory
        self._timeout = to_requests_timeout(timeout_seconds)
        self._headers = {
            "User-Agent": user_agent.strip(),
            "Accept": "application/json",
        }
        if accept_language:
            self._headers["Accept-Language"] = accept_language
        if referer:
            self._headers["Referer"] = referer

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET 요청을 보내고 JSON 본문을 반환합니다."""

        def _send() -> requests.Response:
            with self._session_factory() as session:
                return session.get(url, params=params, headers=self._headers, timeout=self._timeout)

        try:
            response = await asyncio.to_thread(_send)
        except requests.Timeout as exc:
            raise TransportError(ErrorKind.TIMEOUT, f"Request timed out: {url}") from exc
        except requests.ConnectionError as exc:
            raise TransportError(ErrorKind.NETWORK, f"Connection failed: {url}") from exc
        except requests.RequestException as exc:
            raise TransportError(ErrorKind.CLIENT_ERROR, f"Request could not be sent: {exc}") from exc

        status_code = response.status_code
        if status_code >= 400:
            body = (response.text or "")[:200]
            logger.error("Provider API error: url=%s status=%s body=%s", url, status_code, body)
            raise TransportError.from_status(
                status_code,
                f"HTTP {status_code} from {url}",
                payload=_parse_json_body(response),
            )

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Provider API response parse failed: url=%s error=%s", url, exc)
            raise TransportError(
                ErrorKind.INVALID_RESPONSE,
                f"Malformed JSON from {url}",
                status_code=status_code,
            ) from exc
