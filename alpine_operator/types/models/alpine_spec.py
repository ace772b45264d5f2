from typing import Any, Dict, List, Mapping, Optional
from alpine_operator.types.base import BaseModel
from alpine_operator.types.models.pod_template import PodTemplate


class ObjectReference(BaseModel):
    api_version: Optional[str]
    kind: Optional[str]
    name: str
    namespace: Optional[str]
    uid: Optional[str]
    resource_version: Optional[str]


class ObjectMeta(BaseModel):
    name: str
    namespace: Optional[str]
    uid: Optional[str]
    resource_version: Optional[str]
    generation: Optional[int]
    labels: Optional[Mapping[str, str]]
    annotations: Optional[Mapping[str, str]]


class AlpineSpec(BaseModel):
    #: Worker pod template; the built-in default is used when absent.
    pod_template: Optional[PodTemplate]


class AlpineStatus(BaseModel):
    #: Worker pods observed during the last reconciliation pass.
    active: List[ObjectReference]


class AlpineObject(BaseModel):
    """A stored Alpine custom resource."""

    api_version: Optional[str]
    kind: Optional[str]
    metadata: ObjectMeta
    #: Raw spec; load with `AlpineSpecSchema` to get an `AlpineSpec`.
    spec: Dict[str, Any]
    status: AlpineStatus

    #: Raw body as returned by the API server, kept for status writes.
    raw: Optional[Dict[str, Any]]


class AlpineList(BaseModel):
    resource_version: Optional[str]
    items: List[AlpineObject]
