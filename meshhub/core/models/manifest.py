"""
Resource model — one rendered Kubernetes object.

The templating engine returns resources; the render engine labels,
filters, and re-namespaces them. Resources are treated as values:
``with_labels`` and ``with_namespace`` return copies.
"""

from __future__ import annotations

import copy
from typing import Any

import yaml
from pydantic import BaseModel, Field


class Resource(BaseModel):
    """A structured manifest object.

    ``body`` holds everything except apiVersion, kind, and the
    metadata fields lifted into attributes (name, namespace, labels).
    """

    api_version: str = ""
    kind: str
    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_manifest(cls, doc: dict[str, Any]) -> Resource:
        """Build a Resource from a parsed YAML document.

        Raises:
            ValueError: If metadata or metadata.labels is not a mapping.
        """
        body = copy.deepcopy(doc)
        api_version = body.pop("apiVersion", "")
        kind = body.pop("kind", "")
        metadata = body.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValueError(f"{kind}: metadata must be a mapping")
        name = metadata.pop("name", "") or ""
        namespace = metadata.pop("namespace", "") or ""
        labels = metadata.pop("labels", None) or {}
        if not isinstance(labels, dict):
            raise ValueError(f"{kind}/{name}: metadata.labels must be a mapping")
        if metadata:
            body["metadata"] = metadata
        else:
            body.pop("metadata", None)
        return cls(
            api_version=str(api_version),
            kind=str(kind),
            name=str(name),
            namespace=str(namespace),
            labels={str(k): str(v) for k, v in labels.items()},
            body=body,
        )

    def to_manifest(self) -> dict[str, Any]:
        """Reassemble the full manifest dict (apiVersion, kind, metadata first)."""
        body = copy.deepcopy(self.body)
        metadata: dict[str, Any] = {}
        if self.name:
            metadata["name"] = self.name
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.labels:
            metadata["labels"] = dict(self.labels)
        metadata.update(body.pop("metadata", {}) or {})

        doc: dict[str, Any] = {"apiVersion": self.api_version, "kind": self.kind}
        if metadata:
            doc["metadata"] = metadata
        doc.update(body)
        return doc

    def with_labels(self, labels: dict[str, str]) -> Resource:
        """Copy of this resource with extra labels (new keys win)."""
        return self.model_copy(
            update={"labels": {**self.labels, **labels}}, deep=True,
        )

    def with_namespace(self, namespace: str) -> Resource:
        return self.model_copy(update={"namespace": namespace}, deep=True)

    def has_labels(self, required: dict[str, str]) -> bool:
        """Whether every required key/value pair is present."""
        return all(self.labels.get(k) == v for k, v in required.items())

    @property
    def resource_id(self) -> str:
        """``Kind/namespace/name`` (namespace omitted when empty)."""
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"


def parse_manifests(text: str) -> list[Resource]:
    """Parse a multi-document YAML string into resources.

    Empty documents are skipped, as are documents without a kind
    (e.g. Helm NOTES or comment-only templates). A List kind is
    flattened into its items.

    Raises:
        yaml.YAMLError: If the text is not valid YAML.
        ValueError: If a document has malformed metadata.
    """
    resources: list[Resource] = []
    for doc in yaml.safe_load_all(text):
        if not doc or not isinstance(doc, dict):
            continue
        if doc.get("kind") == "List" and isinstance(doc.get("items"), list):
            resources.extend(
                Resource.from_manifest(item)
                for item in doc["items"]
                if isinstance(item, dict) and item.get("kind")
            )
            continue
        if not doc.get("kind"):
            continue
        resources.append(Resource.from_manifest(doc))
    return resources


def dump_manifests(resources: list[Resource]) -> str:
    """Serialize resources as a multi-document YAML string (order kept)."""
    return yaml.safe_dump_all(
        [r.to_manifest() for r in resources],
        default_flow_style=False,
        sort_keys=False,
    )
