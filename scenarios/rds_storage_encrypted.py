"""rds-storage-encrypted - instance created with unencrypted storage."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_db_instance
from configdrill.settings import Settings

from scenarios.rds_instance_public_access_check import describe_instance

META = {
    "rule": "rds-storage-encrypted",
    "title": "RDS storage not encrypted",
    "service": "rds",
    "resource_type": "AWS::RDS::DBInstance",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    instance = create_db_instance(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="unencrypted-db",
        PubliclyAccessible=False,
        StorageEncrypted=False,
        BackupRetentionPeriod=0,
    )
    return {"db_instance": instance["DBInstanceIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    encrypted = bool(describe_instance(clients["rds"], state["db_instance"]).get("StorageEncrypted"))
    return {"compliant": encrypted, "evidence": {"db_instance": state["db_instance"], "storage_encrypted": encrypted}}
