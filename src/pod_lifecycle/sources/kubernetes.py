"""Kubernetes snapshot source: pod list, metrics-server pod metrics and raw pod detail.

The official client is synchronous; every call runs in the default executor
so the event loop stays responsive while the tick awaits it.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

import structlog
import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from pod_lifecycle.engine.errors import TransportFault
from pod_lifecycle.models.workload import WorkloadObservation, WorkloadPhase

log = structlog.get_logger()

T = TypeVar("T")

METRICS_GROUP = "metrics.k8s.io"
METRICS_VERSION = "v1beta1"
METRICS_PLURAL = "pods"


def load_client_config(kubeconfig: str | None = None) -> None:
    """Load cluster credentials.

    An explicit kubeconfig path wins; otherwise in-cluster config is tried
    first, then the default kubeconfig for local development.
    """
    if kubeconfig:
        config.load_kube_config(config_file=kubeconfig)
        log.info("loaded kubeconfig", path=kubeconfig)
        return
    try:
        config.load_incluster_config()
        log.info("loaded in-cluster kubernetes config")
    except config.ConfigException:
        config.load_kube_config()
        log.info("loaded default kubeconfig")


class KubernetesSnapshotSource:
    """SnapshotSource backed by the CoreV1 and CustomObjects APIs for one namespace."""

    def __init__(
        self,
        namespace: str = "default",
        core_api: client.CoreV1Api | None = None,
        custom_api: client.CustomObjectsApi | None = None,
    ) -> None:
        self.namespace = namespace
        self._core_api = core_api or client.CoreV1Api()
        self._custom_api = custom_api or client.CustomObjectsApi()

    @classmethod
    def from_kubeconfig(
        cls, namespace: str = "default", kubeconfig: str | None = None
    ) -> KubernetesSnapshotSource:
        load_client_config(kubeconfig)
        return cls(namespace=namespace)

    async def list_workloads(self) -> list[WorkloadObservation]:
        pods = await self._call("list pods", self._core_api.list_namespaced_pod, self.namespace)
        observations = []
        for pod in pods.items:
            if pod.metadata is None or not pod.metadata.name:
                raise TransportFault(
                    "pod listing has an entry without a name", namespace=self.namespace
                )
            phase = pod.status.phase if pod.status else None
            observations.append(
                WorkloadObservation(
                    name=pod.metadata.name,
                    uid=pod.metadata.uid or "",
                    phase=WorkloadPhase.parse(phase),
                )
            )
        return observations

    async def list_metrics(self) -> Sequence[Mapping[str, Any]]:
        data = await self._call(
            "list pod metrics",
            self._custom_api.list_namespaced_custom_object,
            group=METRICS_GROUP,
            version=METRICS_VERSION,
            namespace=self.namespace,
            plural=METRICS_PLURAL,
        )
        items = data.get("items") if isinstance(data, Mapping) else None
        if not isinstance(items, list):
            raise TransportFault(
                "pod metrics response has no items list", namespace=self.namespace
            )
        return items

    async def fetch_detail(self, name: str) -> str:
        response = await self._call(
            "read pod",
            self._core_api.read_namespaced_pod,
            name,
            self.namespace,
            _preload_content=False,
            workload=name,
        )
        try:
            return response.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TransportFault(f"pod detail is not utf-8: {e}", workload=name) from e

    async def _call(
        self,
        what: str,
        fn: Callable[..., T],
        *args: Any,
        workload: str | None = None,
        **kwargs: Any,
    ) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))
        except ApiException as e:
            raise TransportFault(
                f"{what} failed: {e.status} {e.reason}",
                workload=workload,
                namespace=self.namespace,
            ) from e
        except (urllib3.exceptions.HTTPError, OSError, ValueError) as e:
            raise TransportFault(
                f"{what} failed: {e}", workload=workload, namespace=self.namespace
            ) from e
