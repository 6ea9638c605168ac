"""iam-user-group-membership-check - user that belongs to no group."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_user
from configdrill.settings import Settings

META = {
    "rule": "iam-user-group-membership-check",
    "title": "IAM user is not a member of any group",
    "service": "iam",
    "resource_type": "AWS::IAM::User",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    return {"username": create_user(settings, clients, ledger, rule=META["rule"], prefix="groupless-user")}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    groups = [
        group["GroupName"]
        for group in clients["iam"].list_groups_for_user(UserName=state["username"]).get("Groups", [])
    ]
    return {"compliant": bool(groups), "evidence": {"username": state["username"], "groups": groups}}
