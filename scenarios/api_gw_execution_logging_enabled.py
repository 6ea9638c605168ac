"""api-gw-execution-logging-enabled - REST API stage with execution logging off."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, unique_name
from configdrill.settings import Settings

META = {
    "rule": "api-gw-execution-logging-enabled",
    "title": "API Gateway stage execution logging disabled",
    "service": "apigateway",
    "resource_type": "AWS::ApiGateway::Stage",
    "required_env": [],
}

STAGE_NAME = "drill"


def create_mock_api(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    **stage: Any,
) -> Dict[str, str]:
    """REST API with a MOCK GET on / deployed to a single stage."""
    apigateway = clients["apigateway"]
    name = unique_name(prefix)
    api_id = apigateway.create_rest_api(
        name=name,
        description=f"config-drill API for {rule}",
        endpointConfiguration={"types": ["REGIONAL"]},
        tags=drill_tags(settings, rule),
    )["id"]
    ledger.track(
        "apigateway:restapi",
        api_id,
        lambda: apigateway.delete_rest_api(restApiId=api_id),
        arn=f"arn:aws:apigateway:{settings.aws_region}::/restapis/{api_id}",
        note=name,
    )
    root_id = next(item["id"] for item in apigateway.get_resources(restApiId=api_id)["items"] if item["path"] == "/")
    apigateway.put_method(restApiId=api_id, resourceId=root_id, httpMethod="GET", authorizationType="NONE")
    apigateway.put_integration(
        restApiId=api_id,
        resourceId=root_id,
        httpMethod="GET",
        type="MOCK",
        requestTemplates={"application/json": '{"statusCode": 200}'},
    )
    apigateway.put_method_response(restApiId=api_id, resourceId=root_id, httpMethod="GET", statusCode="200")
    apigateway.put_integration_response(
        restApiId=api_id,
        resourceId=root_id,
        httpMethod="GET",
        statusCode="200",
        responseTemplates={"application/json": '{"message": "ok"}'},
    )
    apigateway.create_deployment(restApiId=api_id, stageName=STAGE_NAME, **stage)
    return {"rest_api_id": api_id, "stage": STAGE_NAME}


def get_stage(apigateway: Any, state: Dict[str, Any]) -> Dict[str, Any]:
    return apigateway.get_stage(restApiId=state["rest_api_id"], stageName=state["stage"])


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    return create_mock_api(settings, clients, ledger, rule=META["rule"], prefix="unlogged-api")


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    settings_all = get_stage(clients["apigateway"], state).get("methodSettings", {}).get("*/*", {})
    level = settings_all.get("loggingLevel", "OFF")
    return {
        "compliant": level in {"ERROR", "INFO"},
        "evidence": {"rest_api_id": state["rest_api_id"], "stage": state["stage"], "logging_level": level},
    }
