"""Unit tests for the worker pod owner index."""

import pytest
from alpine_operator.resources import Alpine, OwnerIndex, OwnerKind
from alpine_operator.resources.owner_index import controller_of, pod_reference


def pod_body(
    name="web-1700000000",
    namespace="ns1",
    owner_name="web",
    owner_kind="Alpine",
    owner_api_version="staight.k8s.io/v1",
    controller=True,
):
    owner_references = []
    if owner_name:
        owner_references.append(
            {
                "apiVersion": owner_api_version,
                "kind": owner_kind,
                "name": owner_name,
                "uid": f"uid-{owner_name}",
                "controller": controller,
            }
        )
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{name}",
            "resourceVersion": "7",
            "ownerReferences": owner_references,
        },
    }


@pytest.fixture
def owner_index():
    return OwnerIndex(Alpine.OWNER_KIND)


class TestOwnerKind:
    """Tests for OwnerKind.controls()."""

    def test_api_version(self):
        assert Alpine.OWNER_KIND.api_version == "staight.k8s.io/v1"

    def test_controller_of_matching_kind(self):
        owner = pod_body()["metadata"]["ownerReferences"][0]
        assert Alpine.OWNER_KIND.controls(owner)

    def test_non_controller_reference(self):
        owner = pod_body(controller=False)["metadata"]["ownerReferences"][0]
        assert not Alpine.OWNER_KIND.controls(owner)

    def test_other_group(self):
        owner = pod_body(owner_api_version="other.k8s.io/v1")["metadata"]["ownerReferences"][0]
        assert not Alpine.OWNER_KIND.controls(owner)

    def test_unserved_version(self):
        owner = pod_body(owner_api_version="staight.k8s.io/v2")["metadata"]["ownerReferences"][0]
        assert not Alpine.OWNER_KIND.controls(owner)

    def test_other_kind(self):
        owner = pod_body(owner_kind="ReplicaSet")["metadata"]["ownerReferences"][0]
        assert not Alpine.OWNER_KIND.controls(owner)

    def test_multiple_versions(self):
        kind = OwnerKind("staight.k8s.io", "Alpine", ("v1", "v1beta1"))
        owner = pod_body(owner_api_version="staight.k8s.io/v1beta1")["metadata"]["ownerReferences"][0]
        assert kind.controls(owner)

    def test_missing_reference(self):
        assert not Alpine.OWNER_KIND.controls(None)


class TestHelpers:
    """Tests for controller_of() and pod_reference()."""

    def test_controller_of_picks_controller(self):
        meta = {
            "ownerReferences": [
                {"kind": "Other", "name": "x", "controller": False},
                {"kind": "Alpine", "name": "web", "controller": True},
            ]
        }
        assert controller_of(meta)["name"] == "web"

    def test_controller_of_without_references(self):
        assert controller_of({}) is None

    def test_pod_reference_omits_resource_version(self):
        assert pod_reference(pod_body()) == {
            "apiVersion": "v1",
            "kind": "Pod",
            "name": "web-1700000000",
            "namespace": "ns1",
            "uid": "uid-web-1700000000",
        }


class TestOwnerIndex:
    """Tests for OwnerIndex."""

    def test_extract_owned_pod(self, owner_index):
        entry = owner_index.extract(pod_body())
        assert list(entry) == [("ns1", "web")]
        assert entry[("ns1", "web")]["name"] == "web-1700000000"

    def test_extract_unowned_pod(self, owner_index):
        assert owner_index.extract(pod_body(owner_name=None)) is None

    def test_extract_pod_of_another_controller(self, owner_index):
        assert owner_index.extract(pod_body(owner_kind="ReplicaSet")) is None

    def test_extract_pod_with_non_controller_reference(self, owner_index):
        assert owner_index.extract(pod_body(controller=False)) is None

    def test_filter_keeps_one_owner(self, owner_index):
        bodies = [
            pod_body(name="web-1"),
            pod_body(name="db-1", owner_name="db"),
            pod_body(name="web-other-ns", namespace="ns2"),
            pod_body(name="stray", owner_name=None),
        ]
        children = owner_index.filter(bodies, "web", "ns1")
        assert [child["name"] for child in children] == ["web-1"]

    def test_children_from_index(self):
        reference = pod_reference(pod_body())
        index = OwnerIndex(Alpine.OWNER_KIND, {("ns1", "web"): [reference]})
        assert index.children("web", "ns1") == [reference]

    def test_children_of_unknown_owner(self):
        index = OwnerIndex(Alpine.OWNER_KIND, {})
        assert index.children("web", "ns1") == []

    def test_children_without_index(self, owner_index):
        assert owner_index.children("web", "ns1") == []
