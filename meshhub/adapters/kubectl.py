"""
kubectl cluster client — read-only Secret lookups.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import subprocess

from meshhub.adapters.base import ClusterClient, ClusterQueryError

logger = logging.getLogger(__name__)


def _run_kubectl(
    *args: str,
    timeout: int = 15,
) -> subprocess.CompletedProcess[str]:
    """Run a kubectl command and return the result."""
    return subprocess.run(
        ["kubectl", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def _is_not_found(stderr: str) -> bool:
    return "NotFound" in stderr or "not found" in stderr


class KubectlClusterClient(ClusterClient):
    """Cluster client that shells out to kubectl.

    Uses the current kubeconfig context unless ``context`` is given.
    """

    def __init__(self, *, context: str = "", timeout: int = 15):
        self._context = context
        self._timeout = timeout

    def get_secret(self, namespace: str, name: str) -> dict[str, str] | None:
        args = ["get", "secret", name, "-n", namespace, "-o", "json"]
        if self._context:
            args.extend(["--context", self._context])

        try:
            result = _run_kubectl(*args, timeout=self._timeout)
        except FileNotFoundError as e:
            raise ClusterQueryError("kubectl not available") from e
        except subprocess.TimeoutExpired as e:
            raise ClusterQueryError(f"kubectl timed out after {self._timeout}s") from e

        if result.returncode != 0:
            if _is_not_found(result.stderr):
                logger.debug("Secret %s/%s not found", namespace, name)
                return None
            raise ClusterQueryError(result.stderr.strip() or "kubectl get secret failed")

        try:
            data = json.loads(result.stdout).get("data") or {}
            return {
                key: base64.b64decode(value).decode("utf-8")
                for key, value in data.items()
            }
        except (ValueError, binascii.Error, UnicodeDecodeError) as e:
            raise ClusterQueryError(f"Unreadable Secret {namespace}/{name}: {e}") from e
