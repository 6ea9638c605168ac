"""lambda-inside-vpc - function with no VPC configuration."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_lambda_function
from configdrill.settings import Settings

META = {
    "rule": "lambda-inside-vpc",
    "title": "Lambda function outside a VPC",
    "service": "lambda",
    "resource_type": "AWS::Lambda::Function",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    function = create_lambda_function(settings, clients, ledger, rule=META["rule"], prefix="no-vpc-function")
    return {"function": function["FunctionName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    vpc_config = clients["lambda"].get_function_configuration(FunctionName=state["function"]).get("VpcConfig") or {}
    vpc_id = vpc_config.get("VpcId")
    return {"compliant": bool(vpc_id), "evidence": {"function": state["function"], "vpc_id": vpc_id}}
