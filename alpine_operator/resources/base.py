from typing import Dict, Optional
from kubernetes_asyncio.client import (
    ApiException,
    CoreV1Api,
    CustomObjectsApi,
    V1Pod,
    V1PodList,
)
from kubernetes_asyncio.client.api_client import ApiClient
from alpine_operator.utils.errors import not_found_error


class BaseResource:
    """Base resource model."""

    shared_api_client: ApiClient = None  # Shared across all resource instances

    _name: str
    _namespace: str

    # k8s api clients
    _api_client: ApiClient = None
    _core_v1_api: CoreV1Api = None
    _custom_objects_api: CustomObjectsApi = None

    def __init__(self, name: str, namespace: str):
        self._name = name
        self._namespace = namespace

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def api_client(self) -> ApiClient:
        if self._api_client is None:
            # Use the shared API client if available, otherwise create a new one
            if self.shared_api_client is not None:
                self._api_client = self.shared_api_client
            else:
                self._api_client = ApiClient()
        return self._api_client

    @property
    def core_v1_api(self) -> CoreV1Api:
        if self._core_v1_api is None:
            self._core_v1_api = CoreV1Api(self.api_client)
        return self._core_v1_api

    @property
    def custom_objects_api(self) -> CustomObjectsApi:
        if self._custom_objects_api is None:
            self._custom_objects_api = CustomObjectsApi(self.api_client)
        return self._custom_objects_api

    async def get_custom_object(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
    ) -> Optional[Dict]:
        try:
            return await custom_objects_api.get_namespaced_custom_object(
                group=group,
                version=version,
                namespace=namespace,
                plural=plural,
                name=name,
            )
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise

    async def list_custom_objects(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        label_selector: str = None,
    ) -> Dict:
        return await custom_objects_api.list_namespaced_custom_object(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            label_selector=label_selector,
        )

    async def replace_custom_object_status(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
        body: Dict,
    ) -> Dict:
        """Replace the status sub-resource.

        The body must carry ``metadata.resourceVersion``; a stale version is
        rejected by the API server with a conflict.
        """
        return await custom_objects_api.replace_namespaced_custom_object_status(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
        )

    async def create_pod(
        self, core_v1_api: CoreV1Api, namespace: str, pod: V1Pod
    ) -> V1Pod:
        return await core_v1_api.create_namespaced_pod(namespace=namespace, body=pod)

    async def list_pods(
        self, core_v1_api: CoreV1Api, namespace: str, label_selector: dict = None
    ) -> V1PodList:
        """List pods in namespace, optionally filtered by label selector.

        Args:
            core_v1_api: CoreV1Api instance
            namespace: Namespace to list pods in
            label_selector: Dictionary of label key-value pairs to filter pods

        Returns:
            V1PodList object containing matching pods
        """
        label_selector_str = None
        if label_selector:
            label_selector_str = ",".join([f"{k}={v}" for k, v in label_selector.items()])

        return await core_v1_api.list_namespaced_pod(
            namespace=namespace,
            label_selector=label_selector_str
        )
