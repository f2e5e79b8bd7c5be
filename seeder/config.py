from typing import Optional

from pydantic_settings import BaseSettings

from seeder.exceptions import ConfigurationError

# Environment variables that may carry the connection string, in lookup order
MONGO_URI_ENV_VARS = ("MONGO_URI", "MONGODB_URI", "mongoUri", "DB_URI", "DATABASE_URI")


class Settings(BaseSettings):
    MONGO_URI: Optional[str] = None
    MONGODB_URI: Optional[str] = None
    mongoUri: Optional[str] = None
    DB_URI: Optional[str] = None
    DATABASE_URI: Optional[str] = None
    DATABASE_NAME: Optional[str] = None
    SEED_CONFIG: str = "seed_config.py"

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


settings = Settings()


def resolve_mongo_uri(config_uri: Optional[str], env: Optional[Settings] = None) -> str:
    """Pick the single MongoDB URI supplied by the config file and environment.

    The same URI may be given through several sources, but two sources
    disagreeing is an error since it's unclear which database would be wiped.
    """
    env = env or settings
    sources: dict[str, str] = {}
    if config_uri:
        sources["config.mongo_uri"] = config_uri
    for name in MONGO_URI_ENV_VARS:
        value = getattr(env, name)
        if value:
            sources[name] = value

    if not sources:
        raise ConfigurationError("No MongoDB URI provided")

    distinct = set(sources.values())
    if len(distinct) > 1:
        raise ConfigurationError(
            "Mismatch between MongoDB URIs: " + ", ".join(sources)
        )
    return distinct.pop()
