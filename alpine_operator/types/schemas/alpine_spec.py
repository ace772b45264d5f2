import copy
from marshmallow import EXCLUDE, fields, pre_load, post_dump
from alpine_operator.types.base import BaseSchema
from alpine_operator.types.models import (
    ObjectReference,
    ObjectMeta,
    AlpineSpec,
    AlpineStatus,
    AlpineObject,
    AlpineList,
)
from alpine_operator.types.schemas.pod_template import PodTemplateSchema


class ObjectReferenceSchema(BaseSchema):
    __model__ = ObjectReference

    class Meta:
        unknown = EXCLUDE
        ordered = True

    api_version = fields.Str(data_key="apiVersion", allow_none=True, load_default=None)
    kind = fields.Str(allow_none=True, load_default=None)
    name = fields.Str(required=True, allow_none=False)
    namespace = fields.Str(allow_none=True, load_default=None)
    uid = fields.Str(allow_none=True, load_default=None)
    resource_version = fields.Str(
        data_key="resourceVersion", allow_none=True, load_default=None
    )

    @post_dump
    def drop_nulls(self, data, **kwargs):
        return {k: v for k, v in data.items() if v is not None}


class ObjectMetaSchema(BaseSchema):
    __model__ = ObjectMeta

    class Meta:
        unknown = EXCLUDE
        ordered = True

    name = fields.Str(required=True, allow_none=False)
    namespace = fields.Str(allow_none=True, load_default=None)
    uid = fields.Str(allow_none=True, load_default=None)
    resource_version = fields.Str(
        data_key="resourceVersion", allow_none=True, load_default=None
    )
    generation = fields.Int(allow_none=True, load_default=None)
    labels = fields.Dict(
        keys=fields.String(), values=fields.String(), allow_none=True, load_default=dict
    )
    annotations = fields.Dict(
        keys=fields.String(), values=fields.String(), allow_none=True, load_default=dict
    )


class AlpineSpecSchema(BaseSchema):
    __model__ = AlpineSpec

    pod_template = fields.Nested(
        PodTemplateSchema(),
        data_key="podTemplate",
        allow_none=True,
        load_default=None,
    )


class AlpineStatusSchema(BaseSchema):
    __model__ = AlpineStatus

    class Meta:
        unknown = EXCLUDE
        ordered = True

    active = fields.List(
        fields.Nested(ObjectReferenceSchema()),
        data_key="active",
        allow_none=True,
        load_default=list,
    )

    @pre_load
    def make(self, data, **kwargs):
        if data.get("active") is None:
            data = {**data, "active": []}
        return data


class AlpineSchema(BaseSchema):
    """Schema for a stored Alpine custom resource."""

    __model__ = AlpineObject

    class Meta:
        unknown = EXCLUDE
        ordered = True

    api_version = fields.Str(data_key="apiVersion", allow_none=True, load_default=None)
    kind = fields.Str(allow_none=True, load_default=None)
    metadata = fields.Nested(ObjectMetaSchema(), required=True)
    # Loaded into an AlpineSpec only when a worker pod is constructed, so an
    # invalid template surfaces as a construction failure.
    spec = fields.Dict(keys=fields.String(), values=fields.Raw())
    status = fields.Nested(AlpineStatusSchema())
    raw = fields.Dict(allow_none=True, load_default=None)

    @pre_load
    def make(self, data, **kwargs):
        raw = copy.deepcopy(dict(data))
        status = raw.get("status") or {}
        if not isinstance(status, dict) or AlpineStatusSchema().validate(status):
            # Status is only a snapshot; an unreadable one is replaced on the next write.
            status = {}
        return {
            **raw,
            "spec": raw.get("spec") or {},
            "status": status,
            "raw": raw,
        }


class AlpineListSchema(BaseSchema):
    __model__ = AlpineList

    class Meta:
        unknown = EXCLUDE
        ordered = True

    resource_version = fields.Str(allow_none=True, load_default=None)
    items = fields.List(fields.Nested(AlpineSchema()), load_default=list)

    @pre_load
    def make(self, data, **kwargs):
        metadata = data.get("metadata") or {}
        return {
            "resource_version": metadata.get("resourceVersion"),
            "items": data.get("items") or [],
        }
