"""iam-password-policy - weak account password policy, original restored afterwards."""

from __future__ import annotations

from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.polling import error_code
from configdrill.settings import Settings

META = {
    "rule": "iam-password-policy",
    "title": "Weak IAM account password policy",
    "service": "iam",
    "resource_type": "AWS::::Account",
    "required_env": [],
}

WEAK_POLICY = {
    "MinimumPasswordLength": 6,
    "RequireSymbols": False,
    "RequireNumbers": False,
    "RequireUppercaseCharacters": False,
    "RequireLowercaseCharacters": False,
    "AllowUsersToChangePassword": True,
    "MaxPasswordAge": 180,
    "PasswordReusePrevention": 1,
}

# keys accepted by update_account_password_policy
_UPDATABLE = (
    "MinimumPasswordLength",
    "RequireSymbols",
    "RequireNumbers",
    "RequireUppercaseCharacters",
    "RequireLowercaseCharacters",
    "AllowUsersToChangePassword",
    "MaxPasswordAge",
    "PasswordReusePrevention",
    "HardExpiry",
)

MIN_LENGTH = 14
MAX_AGE_DAYS = 90
MIN_REUSE_PREVENTION = 24


def current_policy(iam: Any) -> Optional[Dict[str, Any]]:
    try:
        policy = iam.get_account_password_policy()["PasswordPolicy"]
    except ClientError as exc:
        if error_code(exc) == "NoSuchEntity":
            return None
        raise
    return {key: policy[key] for key in _UPDATABLE if key in policy}


def restore_policy(iam: Any, original: Optional[Dict[str, Any]]) -> None:
    if original is None:
        iam.delete_account_password_policy()
    else:
        iam.update_account_password_policy(**original)


def policy_issues(policy: Optional[Dict[str, Any]]) -> list:
    if policy is None:
        return ["no password policy"]
    issues = []
    if policy.get("MinimumPasswordLength", 0) < MIN_LENGTH:
        issues.append("MinimumPasswordLength")
    for flag in ("RequireSymbols", "RequireNumbers", "RequireUppercaseCharacters", "RequireLowercaseCharacters"):
        if not policy.get(flag):
            issues.append(flag)
    max_age = policy.get("MaxPasswordAge")
    if not max_age or max_age > MAX_AGE_DAYS:
        issues.append("MaxPasswordAge")
    if policy.get("PasswordReusePrevention", 0) < MIN_REUSE_PREVENTION:
        issues.append("PasswordReusePrevention")
    return issues


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    iam = clients["iam"]
    original = current_policy(iam)
    iam.update_account_password_policy(**WEAK_POLICY)
    ledger.restore(
        "iam:account-password-policy",
        "account",
        lambda: restore_policy(iam, original),
        note="deleted" if original is None else "restored",
    )
    return {"had_policy": original is not None}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    issues = policy_issues(current_policy(clients["iam"]))
    return {"compliant": not issues, "evidence": {"issues": issues}}
