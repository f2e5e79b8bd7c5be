import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from seeder.exceptions import ConfigurationError
from seeder.seeds.models import CollectionConfig, ResolvedCollection, SeedConfig
from seeder.sources.loader import ALLOWED_EXTENSIONS, export_values, import_schema, load_source

logger = logging.getLogger(__name__)

JAVASCRIPT_EXTENSIONS = ("js", "mjs", "cjs")


def validate_path(path: str, collection_name: str) -> None:
    """Reject source paths whose extension we can't load."""
    name = Path(path).name
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""

    if extension not in ALLOWED_EXTENSIONS:
        if extension in JAVASCRIPT_EXTENSIONS:
            logger.warning("JavaScript modules are not supported, use a .py module instead")
        raise ConfigurationError(
            f"Invalid file extension '.{extension}' in the path '{path}' of '{collection_name}'."
        )


def pick_value(config_value: Any, path_value: Any, prefer_path: bool) -> Any:
    """Choose between an inline value and one loaded from a path.

    The preferred side wins when it's set; the other side is the fallback.
    """
    if prefer_path:
        return path_value if path_value is not None else config_value
    return config_value if config_value is not None else path_value


def evaluate_collection_values(
    collection_name: str,
    collection: CollectionConfig,
    prefer_path: bool,
    base_dir: Optional[Path] = None,
) -> tuple[Optional[list], Optional[Any], Optional[str]]:
    """Merge inline values with the ones exported by ``collection.path``.

    Returns ``(data, schema, model)``. Relative paths are resolved against
    ``base_dir`` (the directory of the configuration file).
    """
    path_data = path_schema = path_model = None

    if collection.path:
        validate_path(collection.path, collection_name)
        source = Path(collection.path)
        if base_dir is not None and not source.is_absolute():
            source = base_dir / source
        try:
            path_data, path_schema, path_model = export_values(load_source(source))
        except Exception as exc:
            logger.debug("Loading %s for '%s' failed", source, collection_name, exc_info=True)
            raise ConfigurationError(
                f"The path '{collection.path}' of '{collection_name}' is invalid!"
            ) from exc

    return (
        pick_value(collection.data, path_data, prefer_path),
        pick_value(collection.schema_, path_schema, prefer_path),
        pick_value(collection.model, path_model, prefer_path),
    )


def resolve_collection(
    collection_name: str,
    collection: CollectionConfig,
    config: SeedConfig,
    base_dir: Optional[Path] = None,
) -> ResolvedCollection:
    """Turn one collection's config into validated documents ready to insert."""
    if not collection.data and not collection.path:
        raise ConfigurationError(f"No data or path for '{collection_name}'!")

    if collection.path and collection.data:
        logger.warning(
            "Both data and path were provided in '%s', using %s. "
            "To change this behavior, change 'prefer_path' in the configuration file.",
            collection_name,
            "path" if config.prefer_path else "data",
        )

    data, schema_ref, model = evaluate_collection_values(
        collection_name, collection, config.prefer_path, base_dir
    )
    model = model or collection_name

    if not isinstance(data, list) or schema_ref is None or not isinstance(model, str):
        raise ConfigurationError(
            f"Invalid data, schema or model name for collection '{collection_name}'!"
        )

    schema = import_schema(schema_ref)
    documents = []
    for index, row in enumerate(data):
        try:
            document = schema.model_validate(row)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Document {index} of '{collection_name}' does not match {schema.__name__}:\n{exc}"
            ) from exc
        documents.append(_dump_document(document, row))

    return ResolvedCollection(name=collection_name, model=model, schema=schema, documents=documents)


def _dump_document(document: BaseModel, row: dict[str, Any]) -> dict[str, Any]:
    """Dump a validated document for insertion.

    Optional fields the row left out are omitted rather than stored as null,
    and an ``_id`` given in the row is kept even when the schema lacks it.
    """
    unset_empty = {
        name for name, value in document if value is None and name not in document.model_fields_set
    }
    dumped = document.model_dump(by_alias=True, exclude=unset_empty)
    if "_id" in row:
        dumped.setdefault("_id", row["_id"])
    return dumped


def resolve_collections(config: SeedConfig, base_dir: Optional[Path] = None) -> list[ResolvedCollection]:
    """Resolve every configured collection before the database is touched.

    Every invalid collection is logged. With ``skip_invalid`` they are left
    out; otherwise any invalid collection aborts the run.
    """
    resolved: list[ResolvedCollection] = []
    failed: list[str] = []

    for name, collection in config.collections.items():
        try:
            resolved.append(resolve_collection(name, collection, config, base_dir))
        except ConfigurationError as exc:
            logger.error(str(exc))
            failed.append(name)

    if failed and not config.skip_invalid:
        raise ConfigurationError(f"Invalid collections: {', '.join(failed)}")
    if not resolved:
        raise ConfigurationError("No valid collections found!")
    return resolved
