"""ec2-instance-profile-attached - instance running without an IAM instance profile."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import run_instance
from configdrill.settings import Settings

META = {
    "rule": "ec2-instance-profile-attached",
    "title": "EC2 instance has no instance profile",
    "service": "ec2",
    "resource_type": "AWS::EC2::Instance",
    "required_env": [],
    "hold_seconds": 30,
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    instance = run_instance(settings, clients, ledger, rule=META["rule"], prefix="no-profile-instance")
    return {"instance_id": instance["InstanceId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    instance = clients["ec2"].describe_instances(InstanceIds=[state["instance_id"]])["Reservations"][0]["Instances"][0]
    profile = instance.get("IamInstanceProfile", {}).get("Arn")
    return {"compliant": bool(profile), "evidence": {"instance_id": state["instance_id"], "instance_profile": profile}}
