"""Typed operations against the document-collection store."""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from page_clipper.config import StoreConfig
from page_clipper.errors import DecodingError, EmptyResponseError
from page_clipper.http.executor import ResilientExecutor
from page_clipper.store.models import (
    Collection,
    CollectionsResponse,
    CreateItemResponse,
    Schema,
    SchemaResponse,
)

logger = logging.getLogger(__name__)

_COLLECTIONS_SNIPPET = 200
_SCHEMA_SNIPPET = 500


def encode_segment(value: str) -> str:
    """Percent-encode ``value`` for use as a single path segment."""
    return quote(value, safe="")


def build_item_payload(item: dict[str, Any], content_key: str) -> dict[str, Any]:
    """Nest every non-content field of a flat item under ``properties``."""
    wire_item: dict[str, Any] = {}
    properties: dict[str, Any] = {}
    for key, value in item.items():
        if key == content_key:
            wire_item[key] = value
        else:
            properties[key] = value
    wire_item["properties"] = properties
    return {"items": [wire_item]}


def build_blocks_payload(item_id: str, source_url: str, image_url: str | None = None) -> dict[str, Any]:
    """Rich URL block, plus an image block when an image URL is given."""
    blocks: list[dict[str, Any]] = [{"type": "richUrl", "url": source_url}]
    if image_url:
        blocks.append({"type": "image", "url": image_url, "markdown": f"![]({image_url})"})
    return {
        "blocks": blocks,
        "position": {"position": "end", "pageId": item_id},
    }


class CollectionStoreClient:
    """Client for one space of the document-collection store."""

    def __init__(
        self,
        executor: ResilientExecutor,
        token: str,
        space_id: str,
        config: StoreConfig | None = None,
    ):
        self.executor = executor
        self.config = config or StoreConfig()
        self._token = token
        self.base_url = self.config.base_url.format(space_id=encode_segment(space_id)).rstrip("/")

    def _request(self, method: str, endpoint: str, body: Any = None) -> httpx.Request:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }
        return httpx.Request(
            method,
            f"{self.base_url}{endpoint}",
            headers=headers,
            json=body,
            extensions={"timeout": httpx.Timeout(self.config.timeout_ms / 1000).as_dict()},
        )

    async def list_collections(self) -> list[Collection]:
        """List every collection in the space."""
        body, _ = await self.executor.execute(self._request("GET", "/collections"))
        try:
            return CollectionsResponse.model_validate_json(body).items
        except ValidationError as e:
            raise DecodingError("Unexpected collections response", body, _COLLECTIONS_SNIPPET) from e

    async def fetch_schema(self, collection_id: str) -> Schema:
        """Fetch a collection's content key and ordered properties."""
        endpoint = f"/collections/{encode_segment(collection_id)}/schema?format=schema"
        body, _ = await self.executor.execute(self._request("GET", endpoint))
        try:
            schema = SchemaResponse.model_validate_json(body).to_schema()
        except ValidationError as e:
            raise DecodingError("Unexpected schema response", body, _SCHEMA_SNIPPET) from e
        logger.debug(
            "Schema for %s: content key %r, %d properties",
            collection_id, schema.content_key, len(schema.properties),
        )
        return schema

    async def create_item(self, collection_id: str, item: dict[str, Any], content_key: str) -> str:
        """Create one item and return its remote id."""
        endpoint = f"/collections/{encode_segment(collection_id)}/items"
        payload = build_item_payload(item, content_key)
        body, _ = await self.executor.execute(self._request("POST", endpoint, payload))
        try:
            created = CreateItemResponse.model_validate_json(body)
        except ValidationError as e:
            raise DecodingError("Unexpected create response", body) from e

        item_id = created.items[0].id if created.items else None
        if not item_id:
            raise EmptyResponseError("The store did not return an id for the new item")
        logger.debug("Created item %s in collection %s", item_id, collection_id)
        return item_id

    async def append_content(self, item_id: str, source_url: str, image_url: str | None = None) -> None:
        """Append the source link (and optional image) to the end of a document."""
        payload = build_blocks_payload(item_id, source_url, image_url)
        await self.executor.execute(self._request("POST", "/blocks", payload))
        logger.debug("Appended %d block(s) to %s", len(payload["blocks"]), item_id)
