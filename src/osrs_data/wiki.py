"""
OSRS Wiki client for catalog queries and full page fetches.

Wraps the MediaWiki API with the identification header the wiki requires
and a fixed request pace. Paginated list queries are exposed as lazy
generators that follow the API's continuation tokens until exhausted.
"""

import html
import logging
import re
from collections.abc import Iterator, Sequence
from typing import Any

import httpx

from osrs_data.config import Settings, get_settings
from osrs_data.exceptions import ConfigurationError, WikiError
from osrs_data.pacer import RequestPacer
from osrs_data.types import ParsedPage, ParseProperty

log = logging.getLogger(__name__)

_USER_AGENT_SUFFIX = "osrs-data"
_PARSE_PROPS = "properties|wikitext|displaytitle|revid|text"
_PROGRESS_EVERY = 10
_TAG_RE = re.compile(r"<.*?>")


def clean_display_title(title: str) -> str:
    """Display titles come back as HTML fragments: drop tags and decode entities."""
    return html.unescape(_TAG_RE.sub("", title)).strip()


class WikiClient:
    def __init__(self, settings: Settings | None = None, pacer: RequestPacer | None = None):
        settings = settings or get_settings()
        if not settings.user_agent or not settings.user_agent.strip():
            raise ConfigurationError(
                "OSRS_USER_AGENT is not set; the wiki requires an identifying User-Agent"
            )
        self._settings = settings
        self._headers = {"User-Agent": f"{settings.user_agent.strip()} - {_USER_AGENT_SUFFIX}"}
        self._pacer = pacer or RequestPacer(settings.request_interval)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def query(self, params: dict[str, Any]) -> dict[str, Any]:
        call_params = {**params, "format": "json"}
        action = call_params.get("action", "?")
        self._pacer.wait()
        try:
            response = httpx.get(
                self._settings.api_url,
                params=call_params,
                headers=self._headers,
                timeout=self._settings.api_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WikiError(
                f"Wiki API '{action}' request failed: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise WikiError(f"Network error calling wiki API '{action}': {e}") from e

        try:
            data: dict[str, Any] = response.json()
        except (ValueError, TypeError) as e:
            raise WikiError(f"Invalid JSON response for wiki API '{action}'") from e

        if "error" in data:
            error_info = data["error"].get("info", "Unknown error")
            raise WikiError(f"Wiki API '{action}' returned an error: {error_info}")

        return data

    def paginate(
        self, continue_key: str, result_key: str, params: dict[str, Any], strict: bool = False
    ) -> Iterator[list[dict[str, Any]]]:
        """
        Yield result batches of a list/prop query until no continuation is left.

        A transport failure ends the sequence early; batches already yielded
        are kept by the caller and nothing is retried. With ``strict`` the
        failure is raised after those batches instead, so the caller can tell
        a truncated listing from a complete one.
        """
        continuation: dict[str, Any] = {}
        batch = 0
        while True:
            if batch % _PROGRESS_EVERY == 0:
                log.info("Querying %s: batch %d", result_key, batch)
            try:
                data = self.query({**params, **continuation})
            except WikiError as e:
                log.error("Stopping %s pagination after %d batch(es): %s", result_key, batch, e)
                if strict:
                    raise
                return

            batch += 1
            values = (data.get("query") or {}).get(result_key) or []
            if isinstance(values, dict):
                values = list(values.values())
            yield values

            continuation = data.get("continue") or {}
            if not continuation.get(continue_key):
                log.info("Done querying %s: %d batch(es)", result_key, batch)
                return

    def parse_page(self, page_id: int) -> ParsedPage:
        if page_id <= 0:
            raise WikiError(f"Invalid page ID: {page_id}")

        data = self.query({"action": "parse", "pageid": str(page_id), "prop": _PARSE_PROPS})
        result = data.get("parse")
        if not result or "text" not in result or "wikitext" not in result:
            raise WikiError(f"Unexpected parse response format for page {page_id}")

        properties: list[ParseProperty] = [
            {"name": p["name"], "value": p.get("*", "")} for p in result.get("properties", [])
        ]
        return ParsedPage(
            page_id=page_id,
            title=result.get("title", ""),
            display_title=clean_display_title(result.get("displaytitle", "")),
            revision_id=int(result["revid"]),
            html=result["text"]["*"],
            wikitext=result["wikitext"]["*"],
            properties=properties,
        )

    def export_pages(self, titles: Sequence[str]) -> bytes:
        if not titles:
            raise WikiError("Cannot export an empty title list")

        log.info("Requesting Special:Export for %d page(s)", len(titles))
        self._pacer.wait()
        try:
            response = httpx.post(
                self._settings.export_url,
                data={
                    "pages": "\n".join(titles),
                    "curonly": "1",
                    "templates": "1",
                    "wpDownload": "1",
                },
                headers=self._headers,
                timeout=None,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WikiError(f"Special:Export failed: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise WikiError(f"Network error calling Special:Export: {e}") from e

        log.info("Export successful: %d bytes", len(response.content))
        return response.content

    def fetch_ge_limits(self) -> dict[str, int]:
        self._pacer.wait()
        try:
            response = httpx.get(
                self._settings.ge_limits_url,
                headers=self._headers,
                timeout=self._settings.api_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise WikiError(f"Failed to fetch GE limits: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise WikiError(f"Network error fetching GE limits: {e}") from e
        except ValueError as e:
            raise WikiError("Invalid JSON in GE limits module") from e

        # The module also carries bookkeeping keys such as "%LAST_UPDATE%"
        return {
            name: int(limit)
            for name, limit in data.items()
            if isinstance(limit, int | float) and not name.startswith("%")
        }
