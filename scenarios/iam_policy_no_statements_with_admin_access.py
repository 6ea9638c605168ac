"""iam-policy-no-statements-with-admin-access - customer managed policy granting *:*."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import admin_access_issues, admin_access_policy
from configdrill.provision import create_managed_policy, get_policy_document, wait_for_policy
from configdrill.settings import Settings

META = {
    "rule": "iam-policy-no-statements-with-admin-access",
    "title": "IAM policy grants full administrative access",
    "service": "iam",
    "resource_type": "AWS::IAM::Policy",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    arn = create_managed_policy(
        settings, clients, ledger, rule=META["rule"], prefix="admin-access-policy", document=admin_access_policy()
    )
    wait_for_policy(settings, clients, arn)
    return {"policy_arn": arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    issues = admin_access_issues(get_policy_document(clients["iam"], state["policy_arn"]))
    return {"compliant": not issues, "evidence": {"policy_arn": state["policy_arn"], "issues": issues}}
