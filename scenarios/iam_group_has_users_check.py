"""iam-group-has-users-check - IAM group with no members."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_group
from configdrill.settings import Settings

META = {
    "rule": "iam-group-has-users-check",
    "title": "IAM group has no users",
    "service": "iam",
    "resource_type": "AWS::IAM::Group",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    return {"group_name": create_group(settings, clients, ledger, prefix="empty-group")}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    users = clients["iam"].get_group(GroupName=state["group_name"]).get("Users", [])
    return {"compliant": bool(users), "evidence": {"group_name": state["group_name"], "users": len(users)}}
