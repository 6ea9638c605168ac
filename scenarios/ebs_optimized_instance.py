"""
ebs-optimized-instance - instance launched with EBS optimization turned off.

The rule only applies to instance types where EBS optimization is optional,
so the scenario uses an m4.large rather than a type that is always optimized.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import run_instance
from configdrill.settings import Settings

META = {
    "rule": "ebs-optimized-instance",
    "title": "EC2 instance not EBS-optimized",
    "service": "ec2",
    "resource_type": "AWS::EC2::Instance",
    "required_env": [],
    "hold_seconds": 30,
}

INSTANCE_TYPE = "m4.large"


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    instance = run_instance(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="not-ebs-optimized",
        InstanceType=INSTANCE_TYPE,
        EbsOptimized=False,
    )
    return {"instance_id": instance["InstanceId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    instance = clients["ec2"].describe_instances(InstanceIds=[state["instance_id"]])["Reservations"][0]["Instances"][0]
    optimized = bool(instance.get("EbsOptimized"))
    return {
        "compliant": optimized,
        "evidence": {
            "instance_id": state["instance_id"],
            "instance_type": instance.get("InstanceType"),
            "ebs_optimized": optimized,
        },
    }
