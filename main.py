"""Compatibility layer exposing the collection box application."""

from fastapi import FastAPI

from collection_box import create_app
from collection_box.core import Settings
from collection_box.state import CollectionBoxState

app = create_app()

__all__ = [
    "app",
    "create_app",
    "Settings",
    "CollectionBoxState",
    "get_app_state",
]


def get_app_state(app_instance: FastAPI = app) -> CollectionBoxState:
    """Return the current state for the provided FastAPI app."""
    state = getattr(app_instance.state, "collection_box", None)
    if not state:
        raise RuntimeError("Collection box state has not been initialized")
    return state


if __name__ == "__main__":
    from collection_box.server import main

    raise SystemExit(main())
