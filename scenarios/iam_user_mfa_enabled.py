"""iam-user-mfa-enabled - console user with no MFA device."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import generate_password
from configdrill.provision import create_user
from configdrill.settings import Settings

META = {
    "rule": "iam-user-mfa-enabled",
    "title": "IAM user without MFA",
    "service": "iam",
    "resource_type": "AWS::IAM::User",
    "required_env": [],
}


def create_console_user(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, prefix: str
) -> str:
    """Create a user with a console password and no MFA device; the password is never logged."""
    username = create_user(settings, clients, ledger, rule=rule, prefix=prefix)
    clients["iam"].create_login_profile(
        UserName=username,
        Password=generate_password(16),
        PasswordResetRequired=True,
    )
    return username


def mfa_devices(iam: Any, username: str) -> list:
    return [device["SerialNumber"] for device in iam.list_mfa_devices(UserName=username).get("MFADevices", [])]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    username = create_console_user(settings, clients, ledger, rule=META["rule"], prefix="no-mfa-user")
    return {"username": username}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    devices = mfa_devices(clients["iam"], state["username"])
    return {"compliant": bool(devices), "evidence": {"username": state["username"], "mfa_devices": len(devices)}}
