"""
dynamodb-in-backup-plan - table that no AWS Backup plan selects.

Only explicit resource ARNs and ARN wildcards in backup selections are
matched; tag-based selections are not evaluated.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_table
from configdrill.settings import Settings

META = {
    "rule": "dynamodb-in-backup-plan",
    "title": "DynamoDB table not in a backup plan",
    "service": "dynamodb",
    "resource_type": "AWS::DynamoDB::Table",
    "required_env": [],
}


def selection_covers(selection: Dict[str, Any], resource_arn: str) -> bool:
    if any(fnmatchcase(resource_arn, pattern) for pattern in selection.get("NotResources") or []):
        return False
    return any(fnmatchcase(resource_arn, pattern) for pattern in selection.get("Resources") or [])


def protecting_plans(backup: Any, resource_arn: str) -> List[str]:
    """Names of the backup plans with a selection covering ``resource_arn``."""
    plans: List[str] = []
    for page in backup.get_paginator("list_backup_plans").paginate():
        for plan in page.get("BackupPlansList", []):
            plan_id = plan["BackupPlanId"]
            for selections in backup.get_paginator("list_backup_selections").paginate(BackupPlanId=plan_id):
                for item in selections.get("BackupSelectionsList", []):
                    selection = backup.get_backup_selection(BackupPlanId=plan_id, SelectionId=item["SelectionId"])
                    if selection_covers(selection["BackupSelection"], resource_arn):
                        plans.append(plan.get("BackupPlanName", plan_id))
                        break
    return plans


def backup_plan_verdict(clients: Dict[str, Any], resource_arn: str, **evidence: Any) -> Dict[str, Any]:
    plans = protecting_plans(clients["backup"], resource_arn)
    evidence["backup_plans"] = plans
    return {"compliant": bool(plans), "evidence": evidence}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    table = create_table(settings, clients, ledger, rule=META["rule"], prefix="unprotected-table")
    return {"table": table["TableName"], "table_arn": table["TableArn"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    return backup_plan_verdict(clients, state["table_arn"], table=state["table"])
