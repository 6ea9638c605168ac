"""db-instance-backup-enabled - instance with automated backups turned off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_db_instance
from configdrill.settings import Settings

from scenarios.rds_instance_public_access_check import describe_instance

META = {
    "rule": "db-instance-backup-enabled",
    "title": "RDS automated backups disabled",
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
        prefix="no-backup-db",
        PubliclyAccessible=False,
        BackupRetentionPeriod=0,
    )
    return {"db_instance": instance["DBInstanceIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    retention = describe_instance(clients["rds"], state["db_instance"]).get("BackupRetentionPeriod", 0)
    return {
        "compliant": retention > 0,
        "evidence": {"db_instance": state["db_instance"], "backup_retention_period": retention},
    }
