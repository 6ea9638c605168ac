"""
opensearch-in-vpc-only - domain with a public endpoint.

Domains take a long time to become active, so the poller runs with a
six times longer interval than the other scenarios.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from botocore.exceptions import ClientError

from configdrill.clients import resolve_account_id
from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.policies import opensearch_access_policy, to_json
from configdrill.polling import error_code, wait_for_state
from configdrill.settings import Settings

logger = logging.getLogger(__name__)

META = {
    "rule": "opensearch-in-vpc-only",
    "title": "OpenSearch domain not in a VPC",
    "service": "opensearch",
    "resource_type": "AWS::OpenSearch::Domain",
    "required_env": [],
}

ENGINE_VERSION = "OpenSearch_2.11"


def ensure_service_linked_role(iam: Any) -> None:
    try:
        iam.create_service_linked_role(AWSServiceName="opensearchservice.amazonaws.com")
    except ClientError as exc:
        if error_code(exc) != "InvalidInput":
            raise
        logger.debug("OpenSearch service-linked role already exists")


def create_domain(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    **extra: Any,
) -> Dict[str, Any]:
    opensearch = clients["opensearch"]
    ensure_service_linked_role(clients["iam"])
    name = unique_name(prefix, max_length=28)
    account_id = resolve_account_id(settings, clients)
    domain_arn = f"arn:aws:es:{settings.aws_region}:{account_id}:domain/{name}"
    extra.setdefault("EngineVersion", ENGINE_VERSION)
    status = opensearch.create_domain(
        DomainName=name,
        ClusterConfig={"InstanceType": "t3.small.search", "InstanceCount": 1},
        EBSOptions={"EBSEnabled": True, "VolumeType": "gp3", "VolumeSize": 10},
        AccessPolicies=to_json(opensearch_access_policy(domain_arn, settings.allowed_ip)),
        TagList=tag_list(drill_tags(settings, rule)),
        **extra,
    )["DomainStatus"]
    ledger.track(
        "opensearch:domain", name, lambda: opensearch.delete_domain(DomainName=name), arn=status.get("ARN")
    )
    wait_for_state(
        lambda: opensearch.describe_domain(DomainName=name),
        target=False,
        status_of=lambda r: r["DomainStatus"].get("Processing", True),
        label=f"domain {name}",
        **settings.poll_kwargs(factor=6),
    )
    return status


def describe_domain(opensearch: Any, name: str) -> Dict[str, Any]:
    return opensearch.describe_domain(DomainName=name)["DomainStatus"]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    status = create_domain(settings, clients, ledger, rule=META["rule"], prefix="drill-public")
    return {"domain": status["DomainName"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    vpc_options = describe_domain(clients["opensearch"], state["domain"]).get("VPCOptions") or {}
    in_vpc = bool(vpc_options.get("VPCId"))
    return {"compliant": in_vpc, "evidence": {"domain": state["domain"], "vpc_id": vpc_options.get("VPCId")}}
