class SeederError(Exception):
    """Base class for errors that abort a seeding run."""


class ConfigurationError(SeederError):
    """The seed configuration or environment is invalid.

    Always raised before the database is touched.
    """
