"""iam-inline-policy-blocked-kms-actions - role inline policy allowing blocked KMS actions."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import blocked_kms_actions, blocked_kms_policy
from configdrill.provision import create_role
from configdrill.settings import Settings

META = {
    "rule": "iam-inline-policy-blocked-kms-actions",
    "title": "Inline policy allows blocked KMS actions",
    "service": "iam",
    "resource_type": "AWS::IAM::Role",
    "required_env": [],
}

INLINE_POLICY_NAME = "kms-blocked-actions"


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    role = create_role(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="kms-inline-role",
        service="ec2.amazonaws.com",
        inline_policies={INLINE_POLICY_NAME: blocked_kms_policy()},
    )
    return {"role_name": role["RoleName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    document = clients["iam"].get_role_policy(RoleName=state["role_name"], PolicyName=INLINE_POLICY_NAME)[
        "PolicyDocument"
    ]
    found = blocked_kms_actions(document)
    return {"compliant": not found, "evidence": {"role_name": state["role_name"], "blocked_actions": found}}
