from marshmallow import fields, pre_load
from alpine_operator.types.base import BaseSchema
from alpine_operator.types.models import MetadataTemplate, ResourceTemplate


class MetadataTemplateSchema(BaseSchema):
    __model__ = MetadataTemplate

    labels = fields.Dict(
        keys=fields.String(), values=fields.String(), allow_none=True, load_default=dict
    )
    annotations = fields.Dict(
        keys=fields.String(), values=fields.String(), allow_none=True, load_default=dict
    )


class ResourceTemplateSchema(BaseSchema):
    __model__ = ResourceTemplate
    metadata = fields.Nested(
        MetadataTemplateSchema(), data_key="metadata", allow_none=True
    )

    @pre_load
    def make(self, data, **kwargs):
        if not data.get("metadata"):
            data = {**data, "metadata": {}}
        return data
