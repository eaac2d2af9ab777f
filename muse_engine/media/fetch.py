"""Plain HTTP download used for generated media."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.error import HTTPError
from urllib.request import Request, urlopen

USER_AGENT = "muse/0.1"


@dataclass
class FetchResult:
    ok: bool
    status: int
    status_text: str
    content: bytes = b""
    content_type: str | None = None


def fetch_url(url: str, timeout_s: float = 120.0) -> FetchResult:
    """GET ``url``; HTTP error statuses come back as ``ok=False``.

    Transport failures (DNS, refused connection, timeouts) raise ``URLError``.
    """
    req = Request(url, headers={"User-Agent": USER_AGENT}, method="GET")
    try:
        with urlopen(req, timeout=timeout_s) as resp:
            content = resp.read()
            # file:// responses carry no status code.
            status = getattr(resp, "status", None) or 200
            reason = getattr(resp, "reason", None) or "OK"
            headers = getattr(resp, "headers", None)
            content_type = headers.get_content_type() if headers is not None else None
    except HTTPError as exc:
        return FetchResult(ok=False, status=exc.code, status_text=str(exc.reason or exc.code))
    return FetchResult(
        ok=200 <= status < 300,
        status=status,
        status_text=str(reason),
        content=content,
        content_type=content_type,
    )
