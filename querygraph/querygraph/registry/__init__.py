"""Query registry and resource name/id lookups."""

from querygraph.registry.collection import (
    QueryCollection,
    QueryNameError,
    RegistrationError,
    RegistrationReport,
)
from querygraph.registry.id_registry import IdCollisionError, ResourceIdMap

__all__ = [
    "IdCollisionError",
    "QueryCollection",
    "QueryNameError",
    "RegistrationError",
    "RegistrationReport",
    "ResourceIdMap",
]
