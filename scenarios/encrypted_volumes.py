"""encrypted-volumes - EBS volume created without encryption."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.polling import wait_for_state
from configdrill.provision import ec2_tag_spec, first_availability_zone
from configdrill.settings import Settings

META = {
    "rule": "encrypted-volumes",
    "title": "EBS volume is not encrypted",
    "service": "ec2",
    "resource_type": "AWS::EC2::Volume",
    "required_env": [],
}


def wait_for_volume_available(
    ec2: Any,
    volume_id: str,
    *,
    interval: float = 5.0,
    max_attempts: int = 60,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """Poll DescribeVolumes until the volume is available; ``error`` is terminal."""
    response = wait_for_state(
        lambda: ec2.describe_volumes(VolumeIds=[volume_id]),
        target="available",
        status_of=lambda r: r["Volumes"][0]["State"],
        failure_states={"error", "deleting", "deleted"},
        retry_codes={"InvalidVolume.NotFound"},
        interval=interval,
        max_attempts=max_attempts,
        sleep=sleep,
        label=f"volume {volume_id}",
    )
    return response["Volumes"][0]


def create_volume(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str, **extra: Any
) -> Dict[str, Any]:
    """1 GiB gp3 volume in the first available zone."""
    ec2 = clients["ec2"]
    zone = first_availability_zone(clients)
    name = unique_name(prefix)
    volume = ec2.create_volume(
        AvailabilityZone=zone,
        Size=1,
        VolumeType="gp3",
        TagSpecifications=[ec2_tag_spec(settings, rule, "volume", name)],
        **extra,
    )
    volume_id = volume["VolumeId"]
    ledger.track("ec2:volume", volume_id, lambda: ec2.delete_volume(VolumeId=volume_id), note=name)
    return wait_for_volume_available(ec2, volume_id, **settings.poll_kwargs())


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    volume = create_volume(settings, clients, ledger, rule=META["rule"], prefix="unencrypted-volume", Encrypted=False)
    return {"volume_id": volume["VolumeId"], "availability_zone": volume["AvailabilityZone"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    volume = clients["ec2"].describe_volumes(VolumeIds=[state["volume_id"]])["Volumes"][0]
    encrypted = bool(volume.get("Encrypted"))
    return {"compliant": encrypted, "evidence": {"volume_id": state["volume_id"], "encrypted": encrypted}}
