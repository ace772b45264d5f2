from typing import Any, Dict, NamedTuple, Optional, Tuple
from alpine_operator.types.models.resource_template import ResourceTemplate


class PodTemplate(ResourceTemplate):
    #: Full pod spec (camelCase, as stored in the custom resource).
    spec: Optional[Dict[str, Any]]

    @property
    def has_spec(self) -> bool:
        """True when the user supplied a pod spec, regardless of its content."""
        return getattr(self, "spec", None) is not None

    @property
    def labels(self) -> Dict[str, str]:
        metadata = getattr(self, "metadata", None)
        return dict(getattr(metadata, "labels", None) or {})

    @property
    def annotations(self) -> Dict[str, str]:
        metadata = getattr(self, "metadata", None)
        return dict(getattr(metadata, "annotations", None) or {})


class DefaultWorkerTemplate(NamedTuple):
    """Worker pod used when an Alpine does not carry its own pod template."""

    image: str = "alpine"
    container_name: str = "alpine"
    image_pull_policy: str = "IfNotPresent"
    command: Tuple[str, ...] = ("sleep", "3600")
    restart_policy: str = "Always"

    def as_pod_spec(self) -> Dict[str, Any]:
        """Render a new pod spec dict; callers are free to mutate it."""
        return {
            "containers": [
                {
                    "name": self.container_name,
                    "image": self.image,
                    "imagePullPolicy": self.image_pull_policy,
                    "command": list(self.command),
                }
            ],
            "restartPolicy": self.restart_policy,
        }
