"""Example seed configuration.

Run from this directory:
    mongo-seed --config seed_config.py --dry-run
"""

from schemas import User

config = {
    "no_prompt": False,  # Don't prompt before deleting
    "prefer_path": True,  # With both path and data, use the path. If False, use the data
    "log_level": "info",  # debug | info | warn | error | silent
    # Can also come from MONGO_URI, MONGODB_URI, mongoUri, DB_URI or DATABASE_URI
    "mongo_uri": "mongodb://localhost:27017/my-database",
    "sensitive_debug_log": False,  # Log the MongoDB URI in debug mode
    "collections": {
        "users": {
            "schema": User,
            "model": "User",  # Defaults to the collection name
            "data": [
                {"username": "ada", "email": "ada@example.com", "is_admin": True},
                {"username": "grace", "email": "grace@example.com"},
            ],
        },
        "products": {
            # Alternative to "data": a .json, .yaml/.yml or .py file
            "path": "data/products.json",
        },
    },
}
