from marshmallow import ValidationError, fields, validates
from alpine_operator.types.models import PodTemplate
from alpine_operator.types.schemas.resource_template import ResourceTemplateSchema


class PodTemplateSchema(ResourceTemplateSchema):
    """Schema for the worker pod template of an Alpine.

    The pod spec is kept verbatim. It is only checked for the minimum a
    pod needs to be accepted by the API server.
    """

    __model__ = PodTemplate

    spec = fields.Dict(
        keys=fields.String(),
        values=fields.Raw(),
        data_key="spec",
        allow_none=True,
        load_default=None,
    )

    @validates("spec")
    def validate_spec(self, value, **kwargs):
        if value is None:
            return
        containers = value.get("containers")
        if not isinstance(containers, list) or not containers:
            raise ValidationError("Pod template spec must define at least one container.")
        for idx, container in enumerate(containers):
            if not isinstance(container, dict):
                raise ValidationError(f"Container #{idx} must be an object.")
            for key in ("name", "image"):
                if not container.get(key):
                    raise ValidationError(f"Container #{idx} is missing `{key}`.")
