"""dynamodb-pitr-enabled - table with point-in-time recovery off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_table
from configdrill.settings import Settings

META = {
    "rule": "dynamodb-pitr-enabled",
    "title": "DynamoDB point-in-time recovery disabled",
    "service": "dynamodb",
    "resource_type": "AWS::DynamoDB::Table",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    table = create_table(settings, clients, ledger, rule=META["rule"], prefix="no-pitr-table")
    clients["dynamodb"].update_continuous_backups(
        TableName=table["TableName"],
        PointInTimeRecoverySpecification={"PointInTimeRecoveryEnabled": False},
    )
    return {"table": table["TableName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    backups = clients["dynamodb"].describe_continuous_backups(TableName=state["table"])[
        "ContinuousBackupsDescription"
    ]
    pitr = backups.get("PointInTimeRecoveryDescription", {}).get("PointInTimeRecoveryStatus")
    return {"compliant": pitr == "ENABLED", "evidence": {"table": state["table"], "pitr_status": pitr}}
