from typing import Any

from quart import Quart, current_app

EXTENSION_KEY = "storefront"


def install(app: Quart, store: Any, identity_resolver: Any) -> None:
    """Attach the per-app collaborators handlers pull in at the request boundary."""
    app.extensions[EXTENSION_KEY] = {
        "store": store,
        "identity_resolver": identity_resolver,
    }


def get_store():
    return current_app.extensions[EXTENSION_KEY]["store"]


def get_identity_resolver():
    return current_app.extensions[EXTENSION_KEY]["identity_resolver"]
