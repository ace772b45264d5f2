from .resource_template import MetadataTemplateSchema, ResourceTemplateSchema
from .pod_template import PodTemplateSchema
from .alpine_spec import (
    ObjectReferenceSchema,
    ObjectMetaSchema,
    AlpineSpecSchema,
    AlpineStatusSchema,
    AlpineSchema,
    AlpineListSchema,
)

__all__ = [
    "MetadataTemplateSchema",
    "ResourceTemplateSchema",
    "PodTemplateSchema",
    "ObjectReferenceSchema",
    "ObjectMetaSchema",
    "AlpineSpecSchema",
    "AlpineStatusSchema",
    "AlpineSchema",
    "AlpineListSchema",
]
