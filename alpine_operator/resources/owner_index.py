"""Index of worker pods by their controlling Alpine.

Kopf keeps the index current from pod watch events. This module only
supplies the function that projects a pod onto its owner key, and a
lookup wrapper used by the reconciler.
"""

from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

OwnerKey = Tuple[Optional[str], str]


class OwnerKind(NamedTuple):
    """Kinds of objects that may control a pod, matched by group, kind and served version."""

    group: str
    kind: str
    versions: Tuple[str, ...]

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.versions[0]}"

    def controls(self, owner_reference: Optional[Mapping[str, Any]]) -> bool:
        if not owner_reference or not owner_reference.get("controller"):
            return False
        group, _, version = str(owner_reference.get("apiVersion") or "").rpartition("/")
        return (
            group == self.group
            and version in self.versions
            and owner_reference.get("kind") == self.kind
        )


def controller_of(meta: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """Return the controller owner reference of an object, if any."""
    for owner_reference in meta.get("ownerReferences") or []:
        if owner_reference.get("controller"):
            return owner_reference
    return None


def pod_reference(body: Mapping[str, Any]) -> Dict[str, str]:
    # resourceVersion is left out: it changes with every pod status update.
    meta = body.get("metadata") or {}
    reference = {
        "apiVersion": body.get("apiVersion") or "v1",
        "kind": body.get("kind") or "Pod",
        "name": meta.get("name"),
        "namespace": meta.get("namespace"),
        "uid": meta.get("uid"),
    }
    return {k: v for k, v in reference.items() if v is not None}


class OwnerIndex:
    """Lookup of child pods keyed by ``(namespace, owner name)``."""

    def __init__(self, owner_kind: OwnerKind, index: Optional[Mapping] = None):
        self.owner_kind = owner_kind
        self.index = index

    def key(self, owner_name: str, namespace: Optional[str]) -> OwnerKey:
        return (namespace, owner_name)

    def extract(self, body: Mapping[str, Any]) -> Optional[Dict[OwnerKey, Dict[str, str]]]:
        """Indexing function: project a pod onto its controlling owner.

        Pods without a controller, or controlled by another kind, are not indexed.
        """
        meta = body.get("metadata") or {}
        owner = controller_of(meta)
        if not self.owner_kind.controls(owner):
            return None
        return {self.key(owner["name"], meta.get("namespace")): pod_reference(body)}

    def filter(self, bodies, owner_name: str, namespace: Optional[str]) -> List[Dict[str, str]]:
        """Apply the indexing function to a listing and keep one owner's pods."""
        key = self.key(owner_name, namespace)
        children = []
        for body in bodies:
            entry = self.extract(body)
            if entry and key in entry:
                children.append(entry[key])
        return children

    def children(self, owner_name: str, namespace: Optional[str]) -> List[Dict[str, str]]:
        if self.index is None:
            return []
        try:
            store = self.index[self.key(owner_name, namespace)]
        except KeyError:
            return []
        return list(store)
