"""Informer implementations used by the route sync agent."""

from .base import EventWorker, Informer  # noqa: F401
from .pod import PodInformer  # noqa: F401
from .workload import WorkloadInformer  # noqa: F401

__all__ = ["EventWorker", "Informer", "PodInformer", "WorkloadInformer"]
