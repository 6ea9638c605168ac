"""Resource ledger: records what a scenario created or changed and undoes it."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from botocore.exceptions import ClientError

from .models import ResourceHandle
from .polling import error_code

logger = logging.getLogger(__name__)

# Error codes meaning the resource no longer exists; cleanup treats them as success.
ALREADY_GONE_CODES = {
    "NoSuchEntity",
    "NoSuchEntityException",
    "InvalidGroup.NotFound",
    "InvalidVolume.NotFound",
    "InvalidSnapshot.NotFound",
    "InvalidInstanceID.NotFound",
    "InvalidVpcID.NotFound",
    "InvalidSubnetID.NotFound",
    "InvalidLaunchTemplateId.NotFound",
    "InvalidLaunchTemplateName.NotFoundException",
    "ResourceNotFoundException",
    "ResourceNotFoundFault",
    "NotFound",
    "NotFoundException",
    "NoSuchBucket",
    "NoSuchPublicAccessBlockConfiguration",
    "WAFNonexistentItemException",
    "DBInstanceNotFound",
    "DBInstanceNotFoundFault",
    "FileSystemNotFound",
    "TrailNotFoundException",
    "InvalidDocument",
    "KMSInvalidStateException",
    "LoadBalancerNotFound",
    "DBSnapshotNotFound",
    "InvalidRouteTableID.NotFound",
    "InvalidInternetGatewayID.NotFound",
    "InvalidVpnConnectionID.NotFound",
    "InvalidCustomerGatewayID.NotFound",
    "InvalidVpnGatewayID.NotFound",
    "ClusterNotFound",
    "ClusterNotFoundFault",
    "ClusterParameterGroupNotFound",
    "ReplicationGroupNotFoundFault",
    "AssociationDoesNotExist",
    "DoesNotExistException",
}

Release = Callable[[], Any]


class ResourceLedger:
    """Arena of resource handles with a single LIFO teardown."""

    def __init__(self, *, keep: bool = False, scope: str = "") -> None:
        self.keep = keep
        self.scope = scope
        self._entries: List[Tuple[ResourceHandle, Release]] = []
        self._torn_down = False
        self.failures: List[str] = []

    @property
    def handles(self) -> List[ResourceHandle]:
        return [handle for handle, _ in self._entries]

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def track(
        self,
        kind: str,
        identifier: str,
        release: Release,
        *,
        arn: Optional[str] = None,
        note: str = "",
    ) -> ResourceHandle:
        """Record a resource created by the current scenario."""
        handle = ResourceHandle(kind=kind, identifier=identifier, arn=arn, note=note)
        self._entries.append((handle, release))
        logger.info("Created %s %s", kind, identifier)
        return handle

    def restore(self, kind: str, identifier: str, undo: Release, *, note: str = "") -> ResourceHandle:
        """Record an undo step for a pre-existing resource the scenario modified."""
        handle = ResourceHandle(kind=kind, identifier=identifier, action="restore", note=note)
        self._entries.append((handle, undo))
        logger.info("Modified %s %s; original state will be restored", kind, identifier)
        return handle

    def teardown(self) -> List[ResourceHandle]:
        """Release every handle in reverse order. Runs once; later calls are no-ops."""
        if self._torn_down:
            logger.debug("Ledger %s already torn down", self.scope or "<unnamed>")
            return self.handles
        self._torn_down = True

        for handle, release in reversed(self._entries):
            if handle.action == "create" and self.keep:
                handle.status = "RETAINED"
                logger.warning("Keeping %s %s (keep mode)", handle.kind, handle.identifier)
                continue
            self._release(handle, release)
        return self.handles

    def _release(self, handle: ResourceHandle, release: Release) -> None:
        done_status = "RESTORED" if handle.action == "restore" else "RELEASED"
        try:
            release()
        except ClientError as exc:
            code = error_code(exc)
            if code in ALREADY_GONE_CODES:
                handle.status = "GONE"
                logger.info("%s %s already gone (%s)", handle.kind, handle.identifier, code)
                return
            self._record_failure(handle, exc)
            return
        except Exception as exc:  # cleanup failures never abort the remaining teardown
            self._record_failure(handle, exc)
            return
        handle.status = done_status
        logger.info("%s %s %s", "Restored" if handle.action == "restore" else "Deleted", handle.kind, handle.identifier)

    def _record_failure(self, handle: ResourceHandle, exc: Exception) -> None:
        handle.status = "FAILED"
        message = f"{handle.kind} {handle.identifier}: {exc}"
        self.failures.append(message)
        logger.error("Cleanup failed for %s", message)
        logger.debug("Cleanup failure detail", exc_info=exc)
