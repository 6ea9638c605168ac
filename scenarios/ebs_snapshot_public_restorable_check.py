"""ebs-snapshot-public-restorable-check - snapshot anyone can restore."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.polling import wait_for_state
from configdrill.provision import ec2_tag_spec, first_availability_zone
from configdrill.settings import Settings

from scenarios.encrypted_volumes import wait_for_volume_available

META = {
    "rule": "ebs-snapshot-public-restorable-check",
    "title": "EBS snapshot is publicly restorable",
    "service": "ec2",
    "resource_type": "AWS::EC2::Snapshot",
    "required_env": [],
}


def _make_private(ec2: Any, snapshot_id: str) -> None:
    ec2.modify_snapshot_attribute(
        SnapshotId=snapshot_id,
        Attribute="createVolumePermission",
        OperationType="remove",
        GroupNames=["all"],
    )
    ec2.delete_snapshot(SnapshotId=snapshot_id)


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ec2 = clients["ec2"]
    rule = META["rule"]
    name = unique_name("public-snapshot")
    volume_id = ec2.create_volume(
        AvailabilityZone=first_availability_zone(clients),
        Size=1,
        VolumeType="gp3",
        Encrypted=False,
        TagSpecifications=[ec2_tag_spec(settings, rule, "volume", name)],
    )["VolumeId"]
    ledger.track("ec2:volume", volume_id, lambda: ec2.delete_volume(VolumeId=volume_id), note=name)
    wait_for_volume_available(ec2, volume_id, **settings.poll_kwargs())

    snapshot_id = ec2.create_snapshot(
        VolumeId=volume_id,
        Description="config-drill public snapshot",
        TagSpecifications=[ec2_tag_spec(settings, rule, "snapshot", name)],
    )["SnapshotId"]
    ledger.track("ec2:snapshot", snapshot_id, lambda: _make_private(ec2, snapshot_id), note=name)
    wait_for_state(
        lambda: ec2.describe_snapshots(SnapshotIds=[snapshot_id]),
        target="completed",
        status_of=lambda r: r["Snapshots"][0]["State"],
        failure_states={"error"},
        label=f"snapshot {snapshot_id}",
        **settings.poll_kwargs(factor=2),
    )
    ec2.modify_snapshot_attribute(
        SnapshotId=snapshot_id,
        Attribute="createVolumePermission",
        OperationType="add",
        GroupNames=["all"],
    )
    return {"snapshot_id": snapshot_id, "volume_id": volume_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    permissions = clients["ec2"].describe_snapshot_attribute(
        SnapshotId=state["snapshot_id"], Attribute="createVolumePermission"
    ).get("CreateVolumePermissions", [])
    public = any(entry.get("Group") == "all" for entry in permissions)
    return {"compliant": not public, "evidence": {"snapshot_id": state["snapshot_id"], "public": public}}
