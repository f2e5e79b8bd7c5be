from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# A pydantic model class, or an import string like "myapp.models:User"
SchemaRef = Union[type[BaseModel], str]


class CollectionConfig(BaseModel):
    """How to seed one collection.

    Either ``data`` or ``path`` must be given; when both are, the seed
    config's ``prefer_path`` decides which one wins.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True, extra="forbid")

    schema_: Optional[SchemaRef] = Field(None, alias="schema")  # Document model, validates every row
    model: Optional[str] = None  # Model name, defaults to the collection name
    data: Optional[list[dict[str, Any]]] = None  # Inline documents
    path: Optional[str] = None  # .json, .yaml/.yml or .py file exporting data/schema/model


class SeedConfig(BaseModel):
    """The whole seed configuration file.

    Keys may be written in snake_case or camelCase (``noPrompt``,
    ``preferPath``, ``logLevel``, ``mongoUri``, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    no_prompt: bool = False  # Don't ask before deleting
    # With both path and data, use the path (False: use data). Applies per field:
    # a field missing on the preferred side is taken from the other one.
    prefer_path: bool = True
    log_level: str = "info"  # debug | info | warn | error | silent
    mongo_uri: Optional[str] = None  # Also read from MONGO_URI, MONGODB_URI, mongoUri, DB_URI, DATABASE_URI
    database_name: Optional[str] = None  # Defaults to the database named in the URI
    sensitive_debug_log: bool = False  # Include the URI in debug output
    skip_invalid: bool = False  # Skip invalid collections instead of aborting
    collections: dict[str, CollectionConfig] = Field(default_factory=dict)

    def printable(self) -> dict[str, Any]:
        """Config as a plain dict for debug output, URI masked unless allowed."""
        dumped = self.model_dump(mode="json", exclude={"collections"})
        if not self.sensitive_debug_log and dumped.get("mongo_uri"):
            dumped["mongo_uri"] = "***"
        dumped["collections"] = {
            name: {
                "schema": _schema_name(collection.schema_),
                "model": collection.model,
                "data": len(collection.data) if collection.data is not None else None,
                "path": collection.path,
            }
            for name, collection in self.collections.items()
        }
        return dumped


class ResolvedCollection(BaseModel):
    """A collection ready to be seeded: schema resolved, documents validated."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    name: str  # Collection name in the database
    model: str  # Model name, used in log output
    schema_: type[BaseModel] = Field(alias="schema")
    documents: list[dict[str, Any]]  # Validated documents, ready for insert_many


def _schema_name(schema: Optional[SchemaRef]) -> Optional[str]:
    if schema is None or isinstance(schema, str):
        return schema
    return f"{schema.__module__}:{schema.__qualname__}"
