"""vpc-flow-logs-enabled - fresh VPC with no flow logs."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_vpc
from configdrill.settings import Settings

META = {
    "rule": "vpc-flow-logs-enabled",
    "title": "VPC without flow logs",
    "service": "ec2",
    "resource_type": "AWS::EC2::VPC",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    vpc_id = create_vpc(settings, clients, ledger, rule=META["rule"], prefix="no-flow-logs")
    return {"vpc_id": vpc_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    flow_logs = clients["ec2"].describe_flow_logs(
        Filters=[{"Name": "resource-id", "Values": [state["vpc_id"]]}]
    ).get("FlowLogs", [])
    return {"compliant": bool(flow_logs), "evidence": {"vpc_id": state["vpc_id"], "flow_logs": len(flow_logs)}}
