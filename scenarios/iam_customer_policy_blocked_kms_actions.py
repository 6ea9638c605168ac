"""iam-customer-policy-blocked-kms-actions - managed policy allowing kms:Decrypt on every key."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.policies import blocked_kms_actions, blocked_kms_policy
from configdrill.provision import create_managed_policy, get_policy_document, wait_for_policy
from configdrill.settings import Settings

META = {
    "rule": "iam-customer-policy-blocked-kms-actions",
    "title": "Customer managed policy allows blocked KMS actions",
    "service": "iam",
    "resource_type": "AWS::IAM::Policy",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    arn = create_managed_policy(
        settings, clients, ledger, rule=META["rule"], prefix="kms-blocked-actions", document=blocked_kms_policy()
    )
    wait_for_policy(settings, clients, arn)
    return {"policy_arn": arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    found = blocked_kms_actions(get_policy_document(clients["iam"], state["policy_arn"]))
    return {"compliant": not found, "evidence": {"policy_arn": state["policy_arn"], "blocked_actions": found}}
