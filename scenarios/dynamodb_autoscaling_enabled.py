"""dynamodb-autoscaling-enabled - provisioned table with no scalable targets."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_table
from configdrill.settings import Settings

META = {
    "rule": "dynamodb-autoscaling-enabled",
    "title": "DynamoDB table without auto scaling",
    "service": "dynamodb",
    "resource_type": "AWS::DynamoDB::Table",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    table = create_table(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="no-autoscaling-table",
        BillingMode="PROVISIONED",
        ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5},
    )
    return {"table": table["TableName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    targets = clients["application-autoscaling"].describe_scalable_targets(
        ServiceNamespace="dynamodb",
        ResourceIds=[f"table/{state['table']}"],
    ).get("ScalableTargets", [])
    dimensions = sorted(target["ScalableDimension"] for target in targets)
    return {"compliant": bool(dimensions), "evidence": {"table": state["table"], "scalable_dimensions": dimensions}}
