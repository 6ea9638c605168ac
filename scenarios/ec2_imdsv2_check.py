"""ec2-imdsv2-check - instance that still accepts IMDSv1."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import run_instance
from configdrill.settings import Settings

META = {
    "rule": "ec2-imdsv2-check",
    "title": "EC2 instance does not require IMDSv2",
    "service": "ec2",
    "resource_type": "AWS::EC2::Instance",
    "required_env": [],
    "hold_seconds": 30,
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    instance = run_instance(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="imdsv1-instance",
        MetadataOptions={"HttpTokens": "optional", "HttpEndpoint": "enabled"},
    )
    return {"instance_id": instance["InstanceId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    reservations = clients["ec2"].describe_instances(InstanceIds=[state["instance_id"]])["Reservations"]
    options = reservations[0]["Instances"][0].get("MetadataOptions", {})
    return {
        "compliant": options.get("HttpTokens") == "required",
        "evidence": {"instance_id": state["instance_id"], "http_tokens": options.get("HttpTokens")},
    }
