"""
Contentful Content Delivery API access through the official ``contentful`` SDK,
with include-depth link resolution on the returned payload.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import contentful
import requests
from contentful.errors import HTTPError as ContentfulHTTPError

from ..config import ContentfulConfig, Secrets
from ..util import format_request_exception

logger = logging.getLogger(__name__)


class ContentSourceError(RuntimeError):
    """Raised when the Content Delivery API cannot be queried."""


@dataclass
class Entry:
    """
    A Contentful entry with its links resolved to the requested depth.

    Attributes:
        id: Entry id from ``sys.id``.
        content_type: Content type id from ``sys.contentType``.
        fields: Field values keyed by field id.
        sys: Raw ``sys`` block.
    """
    id: str
    content_type: Optional[str]
    fields: Dict[str, Any]
    sys: Dict[str, Any] = field(default_factory=dict, repr=False)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


@dataclass
class Asset:
    """A Contentful asset (image, file) referenced from an entry."""
    id: str
    fields: Dict[str, Any]
    sys: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def title(self) -> Optional[str]:
        return self.fields.get("title")

    @property
    def url(self) -> Optional[str]:
        file_info = self.fields.get("file") or {}
        url = file_info.get("url") if isinstance(file_info, Mapping) else None
        if url and url.startswith("//"):
            return f"https:{url}"
        return url


Record = Union[Entry, Asset]


def create_sdk_client(
    space_id: str,
    access_token: str,
    *,
    environment: str = "master",
    host: str = "cdn.contentful.com",
    timeout: float = 20.0,
    max_retries: int = 3,
) -> contentful.Client:
    """
    Configure a ``contentful.Client`` that hands back raw responses.

    The SDK owns authentication, URL building and rate-limit backoff; link
    resolution stays here so it follows each query's ``include`` depth.
    """
    return contentful.Client(
        space_id,
        access_token,
        api_url=host,
        environment=environment,
        timeout_s=timeout,
        max_rate_limit_retries=max_retries,
        content_type_cache=False,
        raw_mode=True,
    )


class ContentSourceClient:
    """
    Query entries from one space/environment of the Content Delivery API.

    Build one per site build and close it afterwards.
    """

    def __init__(
        self,
        space_id: str,
        access_token: str,
        *,
        environment: str = "master",
        host: str = "cdn.contentful.com",
        locale: Optional[str] = None,
        timeout: float = 20.0,
        max_retries: int = 3,
        sdk_client: Optional[Any] = None,
    ) -> None:
        self.space_id = space_id
        self.environment = environment
        self.host = host
        self.locale = locale
        self.max_retries = max(1, max_retries)
        self._sdk = sdk_client or create_sdk_client(
            space_id,
            access_token,
            environment=environment,
            host=host,
            timeout=timeout,
            max_retries=max_retries,
        )

    @classmethod
    def from_config(
        cls,
        config: ContentfulConfig,
        secrets: Secrets,
        *,
        sdk_client: Optional[Any] = None,
    ) -> "ContentSourceClient":
        """
        Build a client from site config plus environment secrets.

        Raises:
            ConfigError: If the space id or access token is missing.
        """
        space_id, access_token = secrets.require()
        return cls(
            space_id,
            access_token,
            environment=config.environment,
            host=config.host,
            locale=config.locale,
            timeout=config.timeout,
            max_retries=config.max_retries,
            sdk_client=sdk_client,
        )

    def close(self) -> None:
        # contentful.Client holds no session of its own.
        logger.debug("Closed content source client for space %s", self.space_id)

    def __enter__(self) -> "ContentSourceClient":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def entries(
        self,
        content_type: str,
        *,
        include: int = 0,
        select: Optional[str] = None,
        limit: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[Record]:
        """
        Query entries of ``content_type`` and resolve their links ``include`` levels deep.

        Args:
            content_type: Content type id to filter on.
            include: Link depth to resolve (0 leaves every link unresolved).
            select: Optional field selector, e.g. ``"fields.slug"``.
            limit: Maximum number of entries to return.
            filters: Extra query parameters such as ``{"fields.slug": "about"}``.

        Raises:
            ContentSourceError: If the request fails after retries.
        """
        query: Dict[str, Any] = {"content_type": content_type, "include": include}
        if select:
            query["select"] = select
        if limit is not None:
            query["limit"] = limit
        if self.locale:
            query["locale"] = self.locale
        if filters:
            query.update(filters)

        payload = self._query(query)
        for error in payload.get("errors") or []:
            logger.debug("Contentful reported unresolvable link: %s", error.get("details"))

        items = payload.get("items") or []
        index = _index_includes(payload)
        records = [_build_record(item, index, include) for item in items]
        logger.info(
            "Fetched %d %s entr%s (include=%d)",
            len(records),
            content_type,
            "y" if len(records) == 1 else "ies",
            include,
        )
        return records

    def _query(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        last_error: Optional[str] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self._sdk.entries(dict(query))
                status = response.status_code
                if status >= 400:
                    last_error = f"Contentful request failed: {status} {response.reason or ''}".rstrip()
                    if status < 500:
                        raise ContentSourceError(last_error)
                    logger.warning("%s (attempt %s/%s)", last_error, attempt, self.max_retries)
                else:
                    data = response.json()
                    _validate_response(data)
                    return data
            except ContentfulHTTPError as exc:
                # Raised once the SDK has exhausted its own rate-limit retries.
                raise ContentSourceError(f"Contentful request failed: {exc}") from exc
            except requests.RequestException as exc:
                last_error = f"Contentful request failed: {format_request_exception(exc)}"
                logger.warning("%s (attempt %s/%s)", last_error, attempt, self.max_retries)
            except ValueError as exc:
                last_error = f"Invalid response from Contentful: {exc}"
                logger.warning("%s (attempt %s/%s)", last_error, attempt, self.max_retries)

            if attempt < self.max_retries:
                time.sleep(2 ** (attempt - 1))

        raise ContentSourceError(last_error or "Failed to query Contentful.")


def _validate_response(data: Any) -> None:
    """Ensure the payload looks like an entries collection."""
    if not isinstance(data, dict):
        raise ValueError("response must be a JSON object")
    if not isinstance(data.get("items"), list):
        raise ValueError("response missing 'items' array")


def _index_includes(payload: Mapping[str, Any]) -> Dict[Tuple[str, str], Dict[str, Any]]:
    """Index every entry/asset in the payload by ``(type, id)`` for link lookups."""
    index: Dict[Tuple[str, str], Dict[str, Any]] = {}
    includes = payload.get("includes") or {}
    candidates = list(payload.get("items") or [])
    candidates.extend(includes.get("Entry") or [])
    candidates.extend(includes.get("Asset") or [])
    for raw in candidates:
        sys = raw.get("sys") or {}
        if sys.get("id") and sys.get("type"):
            index[(sys["type"], sys["id"])] = raw
    return index


def _is_link(value: Mapping[str, Any]) -> bool:
    sys = value.get("sys")
    return isinstance(sys, Mapping) and sys.get("type") == "Link"


def _resolve(value: Any, index: Mapping[Tuple[str, str], Dict[str, Any]], depth: int) -> Any:
    if isinstance(value, list):
        return [_resolve(item, index, depth) for item in value]
    if not isinstance(value, dict):
        return value
    if _is_link(value):
        if depth <= 0:
            return value
        sys = value["sys"]
        target = index.get((sys.get("linkType"), sys.get("id")))
        if target is None:
            return value
        return _build_record(target, index, depth - 1)
    return {key: _resolve(item, index, depth) for key, item in value.items()}


def _build_record(raw: Mapping[str, Any], index: Mapping[Tuple[str, str], Dict[str, Any]], depth: int) -> Record:
    sys = dict(raw.get("sys") or {})
    fields = _resolve(dict(raw.get("fields") or {}), index, depth)
    if sys.get("type") == "Asset":
        return Asset(id=sys.get("id", ""), fields=fields, sys=sys)
    content_type = ((sys.get("contentType") or {}).get("sys") or {}).get("id")
    return Entry(id=sys.get("id", ""), content_type=content_type, fields=fields, sys=sys)
