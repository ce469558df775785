"""Collection of APIRouters that make up the collection box."""

from . import collections, health

ROUTERS = [
    health.router,
    collections.router,
]

__all__ = ["ROUTERS"]
