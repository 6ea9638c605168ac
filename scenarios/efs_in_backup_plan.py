"""
efs-in-backup-plan - file system with automatic backups off and no backup plan.

Automatic backups put a file system in the default AWS Backup plan, so the
scenario switches them off explicitly.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.dynamodb_in_backup_plan import backup_plan_verdict
from scenarios.efs_encrypted_check import create_file_system

META = {
    "rule": "efs-in-backup-plan",
    "title": "EFS file system not in a backup plan",
    "service": "efs",
    "resource_type": "AWS::EFS::FileSystem",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    file_system = create_file_system(
        settings, clients, ledger, rule=META["rule"], prefix="unprotected-efs", Encrypted=True, Backup=False
    )
    file_system_id = file_system["FileSystemId"]
    clients["efs"].put_backup_policy(FileSystemId=file_system_id, BackupPolicy={"Status": "DISABLED"})
    return {"file_system_id": file_system_id, "file_system_arn": file_system["FileSystemArn"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    policy = clients["efs"].describe_backup_policy(FileSystemId=state["file_system_id"])["BackupPolicy"]
    verdict = backup_plan_verdict(clients, state["file_system_arn"], file_system_id=state["file_system_id"])
    verdict["evidence"]["automatic_backups"] = policy.get("Status")
    if policy.get("Status") == "ENABLED":
        verdict["compliant"] = True
    return verdict
