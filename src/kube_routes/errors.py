"""Exceptions raised by the route synchronization core."""


class RouteSyncError(Exception):
    """Base class for route synchronization failures."""


class DecodeError(RouteSyncError):
    """The route annotation of a workload is not valid."""


class OwnerResolutionError(RouteSyncError):
    """A pod's owning workload could not be determined or fetched."""


class MessageConstructionError(RouteSyncError):
    """A route message could not be built for a pod and port."""


class ChildListError(RouteSyncError):
    """Listing the pods of a workload failed."""


class CollectError(RouteSyncError):
    """Collecting the desired state of the namespace failed."""
