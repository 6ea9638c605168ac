"""lambda-function-public-access-prohibited - resource policy lets anyone invoke."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Union

from botocore.exceptions import ClientError

from configdrill.ledger import ResourceLedger
from configdrill.polling import error_code
from configdrill.provision import create_lambda_function
from configdrill.settings import Settings

META = {
    "rule": "lambda-function-public-access-prohibited",
    "title": "Lambda function publicly invokable",
    "service": "lambda",
    "resource_type": "AWS::Lambda::Function",
    "required_env": [],
}


def _principal_is_public(principal: Any) -> bool:
    if principal == "*":
        return True
    if isinstance(principal, dict):
        values = principal.get("AWS", [])
        values = values if isinstance(values, list) else [values]
        return "*" in values
    return False


def is_public_policy(policy: Union[str, Dict[str, Any]]) -> bool:
    """True when an Allow statement has a wildcard principal and no condition."""
    document = json.loads(policy) if isinstance(policy, str) else policy
    statements: List[Dict[str, Any]] = document.get("Statement", [])
    if isinstance(statements, dict):
        statements = [statements]
    return any(
        statement.get("Effect") == "Allow"
        and _principal_is_public(statement.get("Principal"))
        and not statement.get("Condition")
        for statement in statements
    )


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    function = create_lambda_function(settings, clients, ledger, rule=META["rule"], prefix="public-function")
    clients["lambda"].add_permission(
        FunctionName=function["FunctionName"],
        StatementId="public-invoke",
        Action="lambda:InvokeFunction",
        Principal="*",
    )
    return {"function": function["FunctionName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    try:
        policy = clients["lambda"].get_policy(FunctionName=state["function"])["Policy"]
    except ClientError as exc:
        if error_code(exc) != "ResourceNotFoundException":
            raise
        policy = "{}"
    public = is_public_policy(policy)
    return {"compliant": not public, "evidence": {"function": state["function"], "public": public}}
