"""pipeline-models — versioned templates and digest-only access tokens."""

from pipeline_models.errors import (
    ConfigurationError,
    DatastoreError,
    DuplicateRecordError,
    ModelsError,
    VersionError,
)
from pipeline_models.factories import FactoryRegistry, TemplateFactory, TokenFactory
from pipeline_models.models import Template, Token
from pipeline_models.version import SemVer

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DatastoreError",
    "DuplicateRecordError",
    "FactoryRegistry",
    "ModelsError",
    "SemVer",
    "Template",
    "TemplateFactory",
    "Token",
    "TokenFactory",
    "VersionError",
    "__version__",
]
