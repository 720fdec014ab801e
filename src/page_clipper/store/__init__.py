"""Document-collection store client and models."""

from page_clipper.store.client import CollectionStoreClient
from page_clipper.store.models import Collection, Property, PropertyType, Schema

__all__ = [
    "Collection",
    "CollectionStoreClient",
    "Property",
    "PropertyType",
    "Schema",
]
