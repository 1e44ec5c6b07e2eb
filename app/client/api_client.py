"""Thin httpx wrapper over the scheduling and image API."""
from datetime import datetime
from typing import Any

import httpx


class ApiError(Exception):
    """Server rejected a request; message is the server's detail."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        # pydantic validation errors: "field: message"
        return "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', [])[1:])}: {err.get('msg', '')}"
            for err in detail
            if isinstance(err, dict)
        )
    return str(detail or f"HTTP {resp.status_code}")


class SchedulerClient:
    """Authenticated client; pass http_client to reuse a transport (e.g. in tests)."""

    def __init__(self, base_url: str = "", token: str | None = None, http_client: httpx.Client | None = None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = http_client or httpx.Client(base_url=base_url)
        self._headers = headers

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self._client.post(path, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise ApiError(f"Could not reach server: {e}") from e
        if resp.is_error:
            raise ApiError(_detail(resp), resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("Unexpected response from server", resp.status_code) from e

    def schedule_linkedin_post(
        self,
        content: str,
        scheduled_for: datetime,
        title: str | None = None,
        image_url: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"content": content, "scheduledFor": scheduled_for.isoformat()}
        if title:
            payload["title"] = title
        if image_url:
            payload["imageUrl"] = image_url
        return self._post("/schedule/linkedin", payload)

    def generate_image(
        self,
        platform: str,
        prompt: str,
        size: str = "square",
        style: str | None = None,
        content_id: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"platform": platform, "prompt": prompt, "size": size}
        if style:
            payload["style"] = style
        if content_id is not None:
            payload["contentId"] = content_id
        return self._post("/images/generate", payload)
