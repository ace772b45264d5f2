import copy
import time
import logging
from datetime import datetime
from logging import Logger
from typing import Any, Dict, List, NamedTuple, Optional, Tuple
from marshmallow import ValidationError
from kubernetes_asyncio.client import (
    ApiException,
    V1ObjectMeta,
    V1OwnerReference,
    V1Pod,
)

from alpine_operator.resources.base import BaseResource
from alpine_operator.resources.owner_index import OwnerIndex, OwnerKind
from alpine_operator.sensors import OperatorSensor
from alpine_operator.types.settings import Settings
from alpine_operator.types.models import (
    AlpineList,
    AlpineObject,
    AlpineSpec,
    AlpineStatus,
    DefaultWorkerTemplate,
    PodTemplate,
)
from alpine_operator.types.schemas import (
    AlpineListSchema,
    AlpineSchema,
    AlpineSpecSchema,
    AlpineStatusSchema,
)
from alpine_operator.utils.errors import (
    ConstructionError,
    CreateError,
    FetchError,
    ListError,
    OwnershipError,
    ReconcileTimeout,
    StatusWriteError,
    already_exists_error,
    conflict_error,
    describe_api_exception,
)
from alpine_operator.utils.helpers import utc_now


class ReconcileResult(NamedTuple):
    """Outcome of one reconciliation pass."""

    #: The Alpine no longer exists; nothing was done.
    deleted: bool = False
    #: References of the worker pods found during the pass.
    children: Tuple[Dict[str, str], ...] = ()
    #: Worker pod created during the pass.
    created: Optional[V1Pod] = None


class Alpine(BaseResource):
    """Alpine kubernetes resource.

    An Alpine keeps exactly one worker pod alive. The pod is created when
    none exists and is never deleted by the operator; garbage collection
    removes it together with its Alpine.
    """

    logger: Logger
    conf: Settings = None
    sensor: OperatorSensor = OperatorSensor()

    KIND = "Alpine"
    GROUP_NAME = "staight.k8s.io"
    GROUP_VERSION = "v1"
    PLURAL_NAME = "alpines"
    OWNER_KIND = OwnerKind(GROUP_NAME, KIND, (GROUP_VERSION,))
    SCHEDULED_AT_ANNOTATION = "staight.k8s.io/scheduled-at"

    uid: Optional[str] = None
    resource_version: Optional[str] = None
    generation: Optional[int] = None
    default_template: DefaultWorkerTemplate

    # desired state
    _spec: Optional[AlpineSpec] = None
    _raw_spec: Optional[Dict[str, Any]] = None
    # body as last read from the API server
    _body: Optional[Dict[str, Any]] = None

    def __init__(
        self,
        name: str,
        namespace: str,
        default_template: Optional[DefaultWorkerTemplate] = None,
        logger: Optional[Logger] = None,
    ):
        super().__init__(name=name, namespace=namespace)
        if default_template is None:
            conf = self.conf or Settings()
            default_template = conf.default_worker_template
        self.default_template = default_template
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_spec(
        cls,
        name: str,
        namespace: str,
        spec: AlpineSpec,
        uid: Optional[str] = None,
        resource_version: Optional[str] = None,
        default_template: Optional[DefaultWorkerTemplate] = None,
        logger: Optional[Logger] = None,
    ) -> "Alpine":
        alpine = cls(name, namespace, default_template=default_template, logger=logger)
        alpine.uid = uid
        alpine.resource_version = resource_version
        alpine._spec = spec
        return alpine

    @classmethod
    def from_object(
        cls,
        obj: AlpineObject,
        default_template: Optional[DefaultWorkerTemplate] = None,
        logger: Optional[Logger] = None,
    ) -> "Alpine":
        alpine = cls(
            obj.metadata.name,
            obj.metadata.namespace,
            default_template=default_template,
            logger=logger,
        )
        alpine.load(obj)
        return alpine

    def load(self, obj: AlpineObject) -> "Alpine":
        """Take identity and desired state from a stored object."""
        self.uid = obj.metadata.uid
        self.resource_version = obj.metadata.resource_version
        self.generation = obj.metadata.generation
        self._raw_spec = obj.spec
        self._spec = None
        self._body = obj.raw
        return self

    @property
    def spec(self) -> AlpineSpec:
        """Desired state, loaded on first use so an invalid template fails construction."""
        if self._spec is None:
            try:
                self._spec = AlpineSpecSchema().load(copy.deepcopy(self._raw_spec or {}))
            except ValidationError as ex:
                raise ConstructionError(
                    f"Invalid pod template on {self.KIND}/{self.name}: {ex.messages}"
                ) from ex
        return self._spec

    @property
    def pod_template(self) -> Optional[PodTemplate]:
        return getattr(self.spec, "pod_template", None)

    @property
    def api_version(self) -> str:
        return self.OWNER_KIND.api_version

    @property
    def owner_index(self) -> OwnerIndex:
        return OwnerIndex(self.OWNER_KIND)

    # =============================================================================
    # Worker pod construction
    # =============================================================================

    def prepare_pod_name(self, scheduled_time: datetime) -> str:
        # Unique per second only; the API server rejects a same-second duplicate.
        return f"{self.name}-{int(scheduled_time.timestamp())}"

    def prepare_pod_spec(self) -> Dict[str, Any]:
        template = self.pod_template
        if template is not None and template.has_spec:
            return copy.deepcopy(template.spec)
        return self.default_template.as_pod_spec()

    def prepare_pod_labels(self) -> Dict[str, str]:
        template = self.pod_template
        return template.labels if template is not None else {}

    def prepare_pod_annotations(self, scheduled_time: datetime) -> Dict[str, str]:
        template = self.pod_template
        annotations = template.annotations if template is not None else {}
        annotations[self.SCHEDULED_AT_ANNOTATION] = scheduled_time.isoformat()
        return annotations

    def prepare_owner_reference(self) -> V1OwnerReference:
        """Controller reference from the worker pod back to this Alpine."""
        if not self.uid:
            raise OwnershipError(
                f"{self.KIND}/{self.name} has no uid; cannot own a worker pod."
            )
        if not self.namespace:
            raise OwnershipError(
                f"{self.KIND}/{self.name} is not namespaced; cannot own a worker pod."
            )
        try:
            return V1OwnerReference(
                api_version=self.api_version,
                kind=self.KIND,
                name=self.name,
                uid=self.uid,
                controller=True,
                block_owner_deletion=True,
            )
        except ValueError as ex:
            raise OwnershipError(str(ex)) from ex

    def prepare_pod(self, scheduled_time: Optional[datetime] = None) -> V1Pod:
        """Build the worker pod for this Alpine.

        A pod template with a spec replaces the default worker entirely;
        template metadata is copied in both cases.
        """
        scheduled_time = scheduled_time or utc_now()
        owner_reference = self.prepare_owner_reference()
        return V1Pod(
            api_version="v1",
            kind="Pod",
            metadata=V1ObjectMeta(
                name=self.prepare_pod_name(scheduled_time),
                namespace=self.namespace,
                labels=self.prepare_pod_labels(),
                annotations=self.prepare_pod_annotations(scheduled_time),
                owner_references=[owner_reference],
            ),
            spec=self.prepare_pod_spec(),
        )

    # =============================================================================
    # Status
    # =============================================================================

    def prepare_status(self, children: List[Dict[str, str]]) -> AlpineStatus:
        return AlpineStatusSchema().load({"active": list(children)})

    def prepare_status_patch(self, children: List[Dict[str, str]]) -> Dict[str, Any]:
        return AlpineStatusSchema().dump(self.prepare_status(children))

    def prepare_status_body(self, status: AlpineStatus) -> Dict[str, Any]:
        """Full object for a status replace, pinned to the last seen resource version."""
        body = copy.deepcopy(self._body) if self._body else {}
        body.setdefault("apiVersion", self.api_version)
        body.setdefault("kind", self.KIND)
        metadata = body.setdefault("metadata", {})
        metadata["name"] = self.name
        metadata["namespace"] = self.namespace
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version
        body["status"] = AlpineStatusSchema().dump(status)
        return body

    # =============================================================================
    # API operations
    # =============================================================================

    async def fetch(self, name: str, namespace: str) -> Optional[AlpineObject]:
        """Fetch an Alpine, or None if it does not exist."""
        try:
            body = await self.get_custom_object(
                self.custom_objects_api,
                namespace=namespace,
                group=self.GROUP_NAME,
                version=self.GROUP_VERSION,
                plural=self.PLURAL_NAME,
                name=name,
            )
        except ApiException as ex:
            raise FetchError(
                f"Unable to fetch {self.KIND}/{name}: {describe_api_exception(ex)}"
            ) from ex
        if body is None:
            return None
        return AlpineSchema().load(body)

    async def search(self, namespace: str, label_selector: str = None) -> AlpineList:
        """List Alpines in a namespace."""
        body = await self.list_custom_objects(
            self.custom_objects_api,
            namespace=namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
            label_selector=label_selector,
        )
        return AlpineListSchema().load(body)

    async def list_children(self) -> List[Dict[str, str]]:
        """Live listing of this Alpine's worker pods, bypassing the index."""
        try:
            pods = await self.list_pods(self.core_v1_api, self.namespace)
        except ApiException as ex:
            raise ListError(
                f"Unable to list pods of {self.KIND}/{self.name}: {describe_api_exception(ex)}"
            ) from ex
        bodies = [self.api_client.sanitize_for_serialization(pod) for pod in pods.items]
        return self.owner_index.filter(bodies, self.name, self.namespace)

    async def write_status(self, status: AlpineStatus) -> None:
        try:
            response = await self.replace_custom_object_status(
                self.custom_objects_api,
                namespace=self.namespace,
                group=self.GROUP_NAME,
                version=self.GROUP_VERSION,
                plural=self.PLURAL_NAME,
                name=self.name,
                body=self.prepare_status_body(status),
            )
        except ApiException as ex:
            detail = "stale resource version" if conflict_error(ex) else describe_api_exception(ex)
            raise StatusWriteError(
                f"Unable to update {self.KIND}/{self.name} status: {detail}"
            ) from ex
        if isinstance(response, dict):
            self.resource_version = (response.get("metadata") or {}).get(
                "resourceVersion", self.resource_version
            )

    async def create_worker(self, pod: V1Pod) -> V1Pod:
        pod_name = pod.metadata.name
        state = self.sensor.on_pod_create_start(self.name, pod_name, self.namespace)
        try:
            created = await self.create_pod(self.core_v1_api, self.namespace, pod)
        except ApiException as ex:
            if already_exists_error(ex):
                message = f"Pod {pod_name} already exists"
            else:
                message = describe_api_exception(ex)
            error = CreateError(
                f"Unable to create pod for {self.KIND}/{self.name}: {message}"
            )
            self.sensor.on_pod_create_complete(
                self.name, pod_name, self.namespace, state, False, error
            )
            raise error from ex
        self.sensor.on_pod_create_complete(self.name, pod_name, self.namespace, state, True)
        return created

    # =============================================================================
    # Reconciliation
    # =============================================================================

    def check_deadline(self, deadline: Optional[float], step: str) -> None:
        if deadline is not None and time.monotonic() > deadline:
            raise ReconcileTimeout(
                f"Reconciliation of {self.KIND}/{self.name} ran out of time before {step}."
            )

    async def reconcile(
        self,
        owner_index: Optional[OwnerIndex] = None,
        deadline: Optional[float] = None,
        live_list_confirm: Optional[bool] = None,
    ) -> ReconcileResult:
        """Make sure one worker pod exists for this Alpine.

        Every step is safe to repeat from scratch: the decision is taken from
        a fresh listing, the status baseline is written before creating, and
        a failure at any step leaves nothing half-done.

        Args:
            owner_index: Index of worker pods by owner; a live listing is used without it.
            deadline: ``time.monotonic()`` value after which the pass is abandoned
                between steps.
            live_list_confirm: Confirm an empty index with a live pod listing.
        """
        if live_list_confirm is None:
            live_list_confirm = (self.conf or Settings()).live_list_confirm_enabled

        obj = await self.fetch(self.name, self.namespace)
        if obj is None:
            self.logger.info(
                f"{self.KIND}/{self.name} not found in {self.namespace} namespace, assuming deleted."
            )
            return ReconcileResult(deleted=True)
        self.load(obj)

        self.check_deadline(deadline, "listing pods")
        if owner_index is not None:
            children = owner_index.children(self.name, self.namespace)
        else:
            children = await self.list_children()
        if not children and owner_index is not None and live_list_confirm:
            # The index may lag behind pods created moments ago.
            children = await self.list_children()

        self.sensor.on_children_observed(self.name, self.namespace, len(children))
        self.logger.debug(f"{self.KIND}/{self.name} has {len(children)} worker pod(s).")
        if children:
            return ReconcileResult(children=tuple(children))

        self.check_deadline(deadline, "updating status")
        await self.write_status(self.prepare_status([]))

        self.check_deadline(deadline, "constructing the worker pod")
        pod = self.prepare_pod()

        self.check_deadline(deadline, "creating the worker pod")
        created = await self.create_worker(pod)
        self.logger.info(
            f"Created worker pod {pod.metadata.name} for {self.KIND}/{self.name} "
            f"in {self.namespace} namespace."
        )
        return ReconcileResult(created=created or pod)
