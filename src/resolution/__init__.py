"""Resolution policy: resolver variants and metadata invalidation."""

from .invalidator import FreshnessInvalidator
from .resolvers import (
    DependencyResolver,
    LocalFirstThenRemoteResolver,
    LocalOnlyResolver,
    RemoteResolver,
    build_resolver,
)

__all__ = [
    "DependencyResolver",
    "FreshnessInvalidator",
    "LocalFirstThenRemoteResolver",
    "LocalOnlyResolver",
    "RemoteResolver",
    "build_resolver",
]
