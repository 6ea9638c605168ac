"""
secretsmanager-scheduled-rotation-success-check - rotation scheduled against a function that always fails.

The rotation function raises on every step, so the immediate rotation never
completes and the secret keeps no LastRotatedDate.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_lambda_function
from configdrill.settings import Settings

from scenarios.secretsmanager_using_cmk import create_secret

META = {
    "rule": "secretsmanager-scheduled-rotation-success-check",
    "title": "Secret rotation failing",
    "service": "secretsmanager",
    "resource_type": "AWS::SecretsManager::Secret",
    "required_env": [],
}

ROTATION_DAYS = 30
FAILING_ROTATION_SOURCE = (
    "def handler(event, context):\n"
    "    raise RuntimeError('rotation step ' + event.get('Step', '?') + ' is not implemented')\n"
)


def rotation_succeeded(secret: Dict[str, Any]) -> bool:
    return bool(secret.get("RotationEnabled")) and secret.get("LastRotatedDate") is not None


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    function = create_lambda_function(
        settings, clients, ledger, rule=META["rule"], prefix="failing-rotation", source=FAILING_ROTATION_SOURCE
    )
    clients["lambda"].add_permission(
        FunctionName=function["FunctionName"],
        StatementId="secretsmanager-invoke",
        Action="lambda:InvokeFunction",
        Principal="secretsmanager.amazonaws.com",
    )
    secret = create_secret(settings, clients, ledger, rule=META["rule"], prefix="failing-rotation-secret")
    clients["secretsmanager"].rotate_secret(
        SecretId=secret["ARN"],
        RotationLambdaARN=function["FunctionArn"],
        RotationRules={"AutomaticallyAfterDays": ROTATION_DAYS},
        RotateImmediately=True,
    )
    return {"secret_arn": secret["ARN"], "function": function["FunctionName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    secret = clients["secretsmanager"].describe_secret(SecretId=state["secret_arn"])
    return {
        "compliant": rotation_succeeded(secret),
        "evidence": {
            "secret_arn": state["secret_arn"],
            "rotation_enabled": bool(secret.get("RotationEnabled")),
            "last_rotated": str(secret["LastRotatedDate"]) if secret.get("LastRotatedDate") else None,
        },
    }
