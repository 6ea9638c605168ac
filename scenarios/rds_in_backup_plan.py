"""rds-in-backup-plan - instance that no AWS Backup plan selects."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_db_instance
from configdrill.settings import Settings

from scenarios.dynamodb_in_backup_plan import backup_plan_verdict

META = {
    "rule": "rds-in-backup-plan",
    "title": "RDS instance not in a backup plan",
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
        BackupRetentionPeriod=0,
    )
    return {"db_instance": instance["DBInstanceIdentifier"], "db_instance_arn": instance["DBInstanceArn"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    return backup_plan_verdict(clients, state["db_instance_arn"], db_instance=state["db_instance"])
