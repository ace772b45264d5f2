from .resource_template import MetadataTemplate, ResourceTemplate
from .pod_template import PodTemplate, DefaultWorkerTemplate
from .alpine_spec import (
    ObjectReference,
    ObjectMeta,
    AlpineSpec,
    AlpineStatus,
    AlpineObject,
    AlpineList,
)

__all__ = [
    "MetadataTemplate",
    "ResourceTemplate",
    "PodTemplate",
    "DefaultWorkerTemplate",
    "ObjectReference",
    "ObjectMeta",
    "AlpineSpec",
    "AlpineStatus",
    "AlpineObject",
    "AlpineList",
]
