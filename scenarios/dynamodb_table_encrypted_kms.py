"""dynamodb-table-encrypted-kms - table on the AWS owned default key."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_table
from configdrill.settings import Settings

META = {
    "rule": "dynamodb-table-encrypted-kms",
    "title": "DynamoDB table not encrypted with KMS",
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
        prefix="owned-key-table",
        SSESpecification={"Enabled": False},
    )
    return {"table": table["TableName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    description = clients["dynamodb"].describe_table(TableName=state["table"])["Table"].get("SSEDescription") or {}
    sse_type = description.get("SSEType")
    return {
        "compliant": sse_type == "KMS" and description.get("Status") == "ENABLED",
        "evidence": {"table": state["table"], "sse_type": sse_type},
    }
