"""
rds-logging-enabled - MySQL instance exporting no logs to CloudWatch.

The managed rule expects every log type of the engine to be exported; for
MySQL those are the audit, error, general and slow query logs.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_db_instance
from configdrill.settings import Settings

from scenarios.rds_instance_public_access_check import describe_instance

META = {
    "rule": "rds-logging-enabled",
    "title": "RDS log exports disabled",
    "service": "rds",
    "resource_type": "AWS::RDS::DBInstance",
    "required_env": [],
}

MYSQL_LOG_TYPES = ("audit", "error", "general", "slowquery")


def missing_log_types(instance: Dict[str, Any], expected=MYSQL_LOG_TYPES) -> List[str]:
    exported = set(instance.get("EnabledCloudwatchLogsExports") or [])
    return [log_type for log_type in expected if log_type not in exported]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    instance = create_db_instance(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="unlogged-db",
        PubliclyAccessible=False,
        BackupRetentionPeriod=0,
    )
    return {"db_instance": instance["DBInstanceIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    missing = missing_log_types(describe_instance(clients["rds"], state["db_instance"]))
    return {"compliant": not missing, "evidence": {"db_instance": state["db_instance"], "missing_log_exports": missing}}
