"""rds-snapshot-encrypted - manual snapshot of an unencrypted instance."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_db_instance, create_db_snapshot
from configdrill.settings import Settings

META = {
    "rule": "rds-snapshot-encrypted",
    "title": "RDS snapshot not encrypted",
    "service": "rds",
    "resource_type": "AWS::RDS::DBSnapshot",
    "required_env": [],
}


def describe_snapshot(rds: Any, identifier: str) -> Dict[str, Any]:
    return rds.describe_db_snapshots(DBSnapshotIdentifier=identifier)["DBSnapshots"][0]


def snapshot_unencrypted_instance(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str
) -> Dict[str, Any]:
    instance = create_db_instance(
        settings,
        clients,
        ledger,
        rule=rule,
        prefix=f"{prefix}-source",
        PubliclyAccessible=False,
        StorageEncrypted=False,
        BackupRetentionPeriod=0,
    )
    snapshot = create_db_snapshot(
        settings, clients, ledger, rule=rule, prefix=prefix, instance_id=instance["DBInstanceIdentifier"]
    )
    return {"db_instance": instance["DBInstanceIdentifier"], "snapshot": snapshot["DBSnapshotIdentifier"]}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    return snapshot_unencrypted_instance(settings, clients, ledger, rule=META["rule"], prefix="unencrypted-snap")


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    encrypted = bool(describe_snapshot(clients["rds"], state["snapshot"]).get("Encrypted"))
    return {"compliant": encrypted, "evidence": {"snapshot": state["snapshot"], "encrypted": encrypted}}
