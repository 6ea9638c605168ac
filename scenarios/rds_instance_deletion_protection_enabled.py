"""rds-instance-deletion-protection-enabled - instance that can be deleted without a guard."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_db_instance
from configdrill.settings import Settings

from scenarios.rds_instance_public_access_check import describe_instance

META = {
    "rule": "rds-instance-deletion-protection-enabled",
    "title": "RDS deletion protection disabled",
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
        prefix="unprotected-db",
        PubliclyAccessible=False,
        DeletionProtection=False,
        BackupRetentionPeriod=0,
    )
    return {"db_instance": instance["DBInstanceIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    protected = bool(describe_instance(clients["rds"], state["db_instance"]).get("DeletionProtection"))
    return {
        "compliant": protected,
        "evidence": {"db_instance": state["db_instance"], "deletion_protection": protected},
    }
