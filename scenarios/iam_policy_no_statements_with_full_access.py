"""iam-policy-no-statements-with-full-access - customer managed policy granting s3:*."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import full_access_actions, full_access_policy
from configdrill.provision import create_managed_policy, get_policy_document, wait_for_policy
from configdrill.settings import Settings

META = {
    "rule": "iam-policy-no-statements-with-full-access",
    "title": "IAM policy grants full access to a service",
    "service": "iam",
    "resource_type": "AWS::IAM::Policy",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    arn = create_managed_policy(
        settings, clients, ledger, rule=META["rule"], prefix="full-access-policy", document=full_access_policy("s3")
    )
    wait_for_policy(settings, clients, arn)
    return {"policy_arn": arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    actions = full_access_actions(get_policy_document(clients["iam"], state["policy_arn"]))
    return {"compliant": not actions, "evidence": {"policy_arn": state["policy_arn"], "full_access_actions": actions}}
