"""mfa-enabled-for-iam-console-access - console password set, MFA missing."""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.polling import error_code
from configdrill.settings import Settings

from scenarios.iam_user_mfa_enabled import create_console_user, mfa_devices

META = {
    "rule": "mfa-enabled-for-iam-console-access",
    "title": "IAM console user without MFA",
    "service": "iam",
    "resource_type": "AWS::IAM::User",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    username = create_console_user(settings, clients, ledger, rule=META["rule"], prefix="console-no-mfa")
    return {"username": username}


def has_console_access(iam: Any, username: str) -> bool:
    try:
        iam.get_login_profile(UserName=username)
    except ClientError as exc:
        if error_code(exc) == "NoSuchEntity":
            return False
        raise
    return True


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    iam = clients["iam"]
    console = has_console_access(iam, state["username"])
    devices = mfa_devices(iam, state["username"])
    return {
        "compliant": not console or bool(devices),
        "evidence": {"username": state["username"], "console_access": console, "mfa_devices": len(devices)},
    }
