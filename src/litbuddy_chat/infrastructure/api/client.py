"""Shared httpx plumbing for the REST collaborators."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from litbuddy_chat.application.exceptions import ApiError, RequestTimeoutError, api_error_for
from litbuddy_chat.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

TIMEOUT_DETAIL = "Request timeout. Please try again."


class RestClient:
    """Thin wrapper over ``httpx.AsyncClient`` that maps failures to ApiError.

    Chat and notification routes authenticate with the session cookie; group
    chat routes expect the bearer token, so callers opt in per request.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        http: httpx.AsyncClient | None = None,
        token: str | None = None,
        cookies: dict[str, str] | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
            cookies=cookies,
        )
        self._token = token

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        default_error: str,
        json: Any = None,
        files: dict[str, Any] | None = None,
        timeout: float | None = None,
        bearer: bool = False,
    ) -> Any:
        headers = {}
        if bearer and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        try:
            resp = await self._http.request(
                method,
                path,
                json=json,
                files=files,
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise RequestTimeoutError(TIMEOUT_DETAIL, status=408) from exc
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(default_error) from exc

        body = _parse_json_safe(resp)
        if resp.is_error:
            detail = body.get("message") if isinstance(body, dict) else None
            logger.info("%s %s -> %d", method, path, resp.status_code)
            raise api_error_for(
                resp.status_code,
                str(detail or default_error),
                body if isinstance(body, dict) else None,
            )
        return body


def _parse_json_safe(resp: httpx.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {}
