"""iam-user-no-policies-check - managed policy attached directly to a user."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_user
from configdrill.settings import Settings

META = {
    "rule": "iam-user-no-policies-check",
    "title": "IAM user has directly attached policies",
    "service": "iam",
    "resource_type": "AWS::IAM::User",
    "required_env": [],
}

READ_ONLY_POLICY_ARN = "arn:aws:iam::aws:policy/ReadOnlyAccess"


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    username = create_user(settings, clients, ledger, rule=META["rule"], prefix="direct-policy-user")
    clients["iam"].attach_user_policy(UserName=username, PolicyArn=READ_ONLY_POLICY_ARN)
    return {"username": username}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    iam = clients["iam"]
    attached = [
        policy["PolicyArn"]
        for policy in iam.list_attached_user_policies(UserName=state["username"]).get("AttachedPolicies", [])
    ]
    inline = iam.list_user_policies(UserName=state["username"]).get("PolicyNames", [])
    return {
        "compliant": not attached and not inline,
        "evidence": {"username": state["username"], "attached": attached, "inline": inline},
    }
