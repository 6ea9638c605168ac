"""iam-no-inline-policy-check - user carrying an inline policy."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import read_only_policy, to_json
from configdrill.provision import create_user
from configdrill.settings import Settings

META = {
    "rule": "iam-no-inline-policy-check",
    "title": "IAM user has an inline policy",
    "service": "iam",
    "resource_type": "AWS::IAM::User",
    "required_env": [],
}

INLINE_POLICY_NAME = "config-drill-inline"


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    username = create_user(settings, clients, ledger, rule=META["rule"], prefix="inline-policy-user")
    clients["iam"].put_user_policy(
        UserName=username,
        PolicyName=INLINE_POLICY_NAME,
        PolicyDocument=to_json(read_only_policy()),
    )
    return {"username": username}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    names = clients["iam"].list_user_policies(UserName=state["username"]).get("PolicyNames", [])
    return {"compliant": not names, "evidence": {"username": state["username"], "inline_policies": names}}
