"""ec2-instance-managed-by-systems-manager - instance with no SSM permissions, so it never registers."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import run_instance
from configdrill.settings import Settings

META = {
    "rule": "ec2-instance-managed-by-systems-manager",
    "title": "EC2 instance not managed by Systems Manager",
    "service": "ssm",
    "resource_type": "AWS::EC2::Instance",
    "required_env": [],
    "hold_seconds": 60,
}


def managed_instance_info(ssm: Any, instance_id: str) -> List[Dict[str, Any]]:
    return ssm.describe_instance_information(
        Filters=[{"Key": "InstanceIds", "Values": [instance_id]}]
    ).get("InstanceInformationList", [])


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    instance = run_instance(settings, clients, ledger, rule=META["rule"], prefix="unmanaged-instance")
    return {"instance_id": instance["InstanceId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    info = managed_instance_info(clients["ssm"], state["instance_id"])
    return {
        "compliant": bool(info),
        "evidence": {"instance_id": state["instance_id"], "ping_status": info[0].get("PingStatus") if info else None},
    }
