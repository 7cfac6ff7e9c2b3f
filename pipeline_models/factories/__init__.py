"""Entity factories and the registry that owns them."""

from pipeline_models.factories.base import BaseFactory, EntityDescriptor
from pipeline_models.factories.registry import FactoryRegistry, create_datastore
from pipeline_models.factories.templates import PatchBumpResolver, TemplateFactory, VersionResolver
from pipeline_models.factories.tokens import TokenFactory

__all__ = [
    "BaseFactory",
    "EntityDescriptor",
    "FactoryRegistry",
    "PatchBumpResolver",
    "TemplateFactory",
    "TokenFactory",
    "VersionResolver",
    "create_datastore",
]
