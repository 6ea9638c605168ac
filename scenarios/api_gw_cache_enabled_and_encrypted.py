"""api-gw-cache-enabled-and-encrypted - REST API stage without a cache cluster."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.api_gw_execution_logging_enabled import create_mock_api, get_stage

META = {
    "rule": "api-gw-cache-enabled-and-encrypted",
    "title": "API Gateway stage cache disabled or unencrypted",
    "service": "apigateway",
    "resource_type": "AWS::ApiGateway::Stage",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    return create_mock_api(
        settings, clients, ledger, rule=META["rule"], prefix="uncached-api", cacheClusterEnabled=False
    )


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    stage = get_stage(clients["apigateway"], state)
    cache_enabled = bool(stage.get("cacheClusterEnabled"))
    encrypted = bool(stage.get("methodSettings", {}).get("*/*", {}).get("cacheDataEncrypted"))
    return {
        "compliant": cache_enabled and encrypted,
        "evidence": {"rest_api_id": state["rest_api_id"], "cache_enabled": cache_enabled, "encrypted": encrypted},
    }
