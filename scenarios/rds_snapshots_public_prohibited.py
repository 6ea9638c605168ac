"""rds-snapshots-public-prohibited - manual snapshot shared with every AWS account."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.rds_snapshot_encrypted import snapshot_unencrypted_instance

META = {
    "rule": "rds-snapshots-public-prohibited",
    "title": "RDS snapshot is public",
    "service": "rds",
    "resource_type": "AWS::RDS::DBSnapshot",
    "required_env": [],
}


def restore_principals(rds: Any, identifier: str) -> List[str]:
    result = rds.describe_db_snapshot_attributes(DBSnapshotIdentifier=identifier)["DBSnapshotAttributesResult"]
    for attribute in result.get("DBSnapshotAttributes", []):
        if attribute.get("AttributeName") == "restore":
            return list(attribute.get("AttributeValues", []))
    return []


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    rds = clients["rds"]
    state = snapshot_unencrypted_instance(settings, clients, ledger, rule=META["rule"], prefix="public-snap")
    snapshot = state["snapshot"]
    rds.modify_db_snapshot_attribute(DBSnapshotIdentifier=snapshot, AttributeName="restore", ValuesToAdd=["all"])
    ledger.restore(
        "rds:snapshot-attribute",
        snapshot,
        lambda: rds.modify_db_snapshot_attribute(
            DBSnapshotIdentifier=snapshot, AttributeName="restore", ValuesToRemove=["all"]
        ),
        note="restore=all",
    )
    return state


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    public = "all" in restore_principals(clients["rds"], state["snapshot"])
    return {"compliant": not public, "evidence": {"snapshot": state["snapshot"], "public": public}}
