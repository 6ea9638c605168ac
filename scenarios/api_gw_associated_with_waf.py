"""api-gw-associated-with-waf - REST API stage with no web ACL."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.api_gw_execution_logging_enabled import create_mock_api, get_stage

META = {
    "rule": "api-gw-associated-with-waf",
    "title": "API Gateway stage not protected by AWS WAF",
    "service": "apigateway",
    "resource_type": "AWS::ApiGateway::Stage",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    return create_mock_api(settings, clients, ledger, rule=META["rule"], prefix="unshielded-api")


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    acl_arn = get_stage(clients["apigateway"], state).get("webAclArn")
    return {
        "compliant": bool(acl_arn),
        "evidence": {"rest_api_id": state["rest_api_id"], "stage": state["stage"], "web_acl_arn": acl_arn},
    }
