"""api-gw-ssl-enabled - REST API stage without a client certificate for the backend."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.settings import Settings

from scenarios.api_gw_execution_logging_enabled import create_mock_api, get_stage

META = {
    "rule": "api-gw-ssl-enabled",
    "title": "API Gateway stage has no client certificate",
    "service": "apigateway",
    "resource_type": "AWS::ApiGateway::Stage",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    return create_mock_api(settings, clients, ledger, rule=META["rule"], prefix="no-client-cert-api")


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    certificate_id = get_stage(clients["apigateway"], state).get("clientCertificateId")
    return {
        "compliant": bool(certificate_id),
        "evidence": {
            "rest_api_id": state["rest_api_id"],
            "stage": state["stage"],
            "client_certificate": certificate_id,
        },
    }
