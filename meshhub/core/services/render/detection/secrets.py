"""
L3 Detection — Secret resolution.

Turns a SecretValue into the literal string used as a parameter value.
Lookups happen just-in-time on every call: nothing is cached and no
secret value is ever logged.
"""

from __future__ import annotations

import logging
from pathlib import Path

from meshhub.adapters.base import ClusterClient, ClusterQueryError
from meshhub.core.models.parameter import SecretRef, SecretValue
from meshhub.core.services.render.errors import SecretNotFound, SecretSourceUnavailable

logger = logging.getLogger(__name__)


class SecretResolver:
    """Resolves secret values for one render call.

    Cluster secrets are only ever read from ``namespace`` (the install
    namespace).
    """

    def __init__(self, namespace: str, cluster: ClusterClient | None = None):
        self._namespace = namespace
        self._cluster = cluster

    @property
    def namespace(self) -> str:
        return self._namespace

    def resolve(self, secret: SecretValue) -> str:
        """Return the literal secret value.

        Raises:
            SecretNotFound: Cluster secret or key is missing.
            SecretSourceUnavailable: File unreadable or cluster unreachable.
        """
        kind = secret.kind()
        if kind == "secret_ref":
            assert secret.secret_ref is not None
            return self._from_cluster(secret.secret_ref)
        elif kind == "file_path":
            assert secret.file_path is not None
            return self._from_file(secret.file_path)
        elif kind == "plain_text":
            assert secret.plain_text is not None
            return secret.plain_text
        raise TypeError(f"Unhandled secret kind: {kind}")

    __call__ = resolve

    def _from_cluster(self, ref: SecretRef) -> str:
        if self._cluster is None:
            raise SecretSourceUnavailable(
                f"Cannot read Secret '{ref.name}': no cluster client configured",
                secret=ref.name,
                namespace=self._namespace,
            )
        logger.debug("Looking up secret %s/%s (key %s)", self._namespace, ref.name, ref.key)
        try:
            data = self._cluster.get_secret(self._namespace, ref.name)
        except ClusterQueryError as e:
            raise SecretSourceUnavailable(
                f"Cannot read Secret '{ref.name}' in namespace '{self._namespace}': {e}",
                secret=ref.name,
                namespace=self._namespace,
            ) from e

        if data is None:
            raise SecretNotFound(
                f"Secret '{ref.name}' not found in namespace '{self._namespace}'",
                secret=ref.name,
                key=ref.key,
                namespace=self._namespace,
            )
        if ref.key not in data:
            raise SecretNotFound(
                f"Secret '{ref.name}' in namespace '{self._namespace}' has no key '{ref.key}'",
                secret=ref.name,
                key=ref.key,
                namespace=self._namespace,
            )
        return data[ref.key]

    def _from_file(self, file_path: str) -> str:
        logger.debug("Reading secret from file %s", file_path)
        try:
            return Path(file_path).expanduser().read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SecretSourceUnavailable(
                f"Cannot read secret file {file_path}: {e}",
                path=file_path,
            ) from e
