"""Loading of seed configuration and collection source files.

Three formats are understood:

- ``.json``: parsed with the standard ``json`` module
- ``.yaml`` / ``.yml``: parsed with PyYAML's ``safe_load``
- ``.py``: imported as a module from its file path, so it can define
  pydantic schemas next to the data

A source module "exports" values the way a config module does: a
``default`` attribute wins if present, otherwise the module-level
``data``, ``schema`` and ``model`` attributes are used.
"""

import hashlib
import importlib
import importlib.util
import json
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel

from seeder.exceptions import ConfigurationError
from seeder.seeds.models import SeedConfig

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("json", "yaml", "yml", "py")


def load_source(path: Union[str, Path]) -> Any:
    """Load a source file according to its extension.

    Raises whatever the parser or the imported module raises; callers turn
    that into a ConfigurationError with context about which file failed.
    """
    path = Path(path)
    extension = path.suffix.lstrip(".").lower()

    if extension == "json":
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    if extension in ("yaml", "yml"):
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    if extension == "py":
        return _import_file(path)

    raise ConfigurationError(f"Unsupported file extension '.{extension}' for '{path}'")


def _import_file(path: Path) -> ModuleType:
    # Unique module name per absolute path, so two data.py files don't collide
    digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:12]
    module_name = f"_seed_source_{path.stem}_{digest}"

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import '{path}'")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def export_values(loaded: Any) -> tuple[Optional[list], Optional[Any], Optional[str]]:
    """Normalise a loaded source into ``(data, schema, model)``.

    - module: its ``default`` attribute if defined, else its attributes
    - list: the documents themselves
    - mapping: ``data`` / ``schema`` / ``model`` keys
    """
    if isinstance(loaded, ModuleType):
        if hasattr(loaded, "default"):
            return export_values(loaded.default)
        return (
            getattr(loaded, "data", None),
            getattr(loaded, "schema", None),
            getattr(loaded, "model", None),
        )
    if isinstance(loaded, list):
        return loaded, None, None
    if isinstance(loaded, dict):
        return loaded.get("data"), loaded.get("schema"), loaded.get("model")
    return None, None, None


def import_schema(ref: Any) -> type[BaseModel]:
    """Resolve a schema reference to a pydantic model class.

    Accepts a model class or an import string ``"package.module:ClassName"``.
    """
    if isinstance(ref, type) and issubclass(ref, BaseModel):
        return ref
    if not isinstance(ref, str):
        raise ConfigurationError(f"Schema must be a pydantic model or an import string, got {ref!r}")

    module_name, _, attr = ref.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"Schema import string '{ref}' must look like 'package.module:ClassName'")
    try:
        target = importlib.import_module(module_name)
        for part in attr.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"Cannot import schema '{ref}': {exc}") from exc

    if not (isinstance(target, type) and issubclass(target, BaseModel)):
        raise ConfigurationError(f"Schema '{ref}' is not a pydantic model")
    return target


def load_seed_config(path: Union[str, Path]) -> SeedConfig:
    """Read and validate the seed configuration file.

    The file's directory is put on ``sys.path`` so that the configuration
    and its ``.py`` sources can import schema modules living next to it,
    and so can ``"module:Class"`` schema strings.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file '{path}' not found")

    config_dir = str(path.resolve().parent)
    if config_dir not in sys.path:
        sys.path.insert(0, config_dir)

    extension = path.suffix.lstrip(".").lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise ConfigurationError(
            f"Invalid configuration file extension '.{extension}', "
            f"expected one of: {', '.join(ALLOWED_EXTENSIONS)}"
        )

    try:
        loaded = load_source(path)
    except ConfigurationError:
        raise
    except Exception as exc:
        logger.debug("Loading %s failed", path, exc_info=True)
        raise ConfigurationError(f"Cannot load configuration file '{path}': {exc}") from exc

    if isinstance(loaded, ModuleType):
        if not hasattr(loaded, "config"):
            raise ConfigurationError(f"Configuration module '{path}' does not define 'config'")
        loaded = loaded.config

    if isinstance(loaded, SeedConfig):
        return loaded
    try:
        return SeedConfig.model_validate(loaded or {})
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration in '{path}':\n{exc}") from exc
