"""Wire and domain models for the document-collection store."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

# Values a draft field can hold before sanitizing.
DraftValue = str | int | float | list[str] | None
DraftItem = dict[str, Any]


class PropertyType(str, Enum):
    """Property types understood by the sanitizer and editor."""

    TEXT = "text"
    DATE = "date"
    SELECT = "select"
    SINGLE_SELECT = "singleSelect"
    MULTI_SELECT = "multiSelect"
    NUMBER = "number"
    URL = "url"
    IMAGE = "image"


SELECT_TYPES = {PropertyType.SELECT.value, PropertyType.SINGLE_SELECT.value}


class Collection(BaseModel):
    """A remote container of items."""

    id: str
    name: str
    item_count: int = Field(default=0, alias="itemCount")

    model_config = {"populate_by_name": True}


class Property(BaseModel):
    """One typed field of a collection schema.

    ``type`` is kept as the raw string so unknown store types still decode;
    compare against :class:`PropertyType` values.
    """

    key: str
    name: str = ""
    type: str = PropertyType.TEXT.value
    options: list[str] | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _flatten_options(cls, value: Any) -> Any:
        # The store sends [{"name": "Todo"}, ...]; plain strings are accepted too.
        if value is None:
            return None
        if not isinstance(value, list):
            return value
        flattened = []
        for option in value:
            if isinstance(option, dict):
                option = option.get("name")
            if isinstance(option, str):
                flattened.append(option)
        return flattened

    @property
    def display_name(self) -> str:
        return self.name or self.key

    @property
    def is_select(self) -> bool:
        return self.type in SELECT_TYPES


class Schema(BaseModel):
    """Ordered properties plus the designated content key."""

    content_key: str
    content_name: str = "Title"
    properties: list[Property] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_keys(self) -> "Schema":
        keys = [p.key for p in self.properties]
        if len(keys) != len(set(keys)):
            raise ValueError("property keys must be unique")
        # The content key lives at the top level of an item, never in properties.
        self.properties = [p for p in self.properties if p.key != self.content_key]
        return self

    def get(self, key: str) -> Property | None:
        for prop in self.properties:
            if prop.key == key:
                return prop
        return None


class CollectionsResponse(BaseModel):
    items: list[Collection]


class ContentPropDetails(BaseModel):
    key: str
    name: str | None = None


class SchemaResponse(BaseModel):
    content_prop_details: ContentPropDetails = Field(alias="contentPropDetails")
    properties: list[Property] = Field(default_factory=list)

    def to_schema(self) -> Schema:
        return Schema(
            content_key=self.content_prop_details.key,
            content_name=self.content_prop_details.name or "Title",
            properties=self.properties,
        )


class CreatedItem(BaseModel):
    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Some stores send numeric ids.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class CreateItemResponse(BaseModel):
    items: list[CreatedItem] = Field(default_factory=list)
