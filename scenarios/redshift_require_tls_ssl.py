"""redshift-require-tls-ssl - cluster whose parameter group leaves ``require_ssl`` off."""

from __future__ import annotations

from typing import Any, Dict, Optional

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.provision import create_redshift_cluster, describe_redshift_cluster
from configdrill.settings import Settings

META = {
    "rule": "redshift-require-tls-ssl",
    "title": "Redshift does not require TLS",
    "service": "redshift",
    "resource_type": "AWS::Redshift::Cluster",
    "required_env": [],
}

PARAMETER_GROUP_FAMILY = "redshift-1.0"


def create_parameter_group(settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str) -> str:
    redshift = clients["redshift"]
    name = unique_name("no-ssl-params", max_length=255).lower()
    redshift.create_cluster_parameter_group(
        ParameterGroupName=name,
        ParameterGroupFamily=PARAMETER_GROUP_FAMILY,
        Description=f"config-drill {rule}",
        Tags=tag_list(drill_tags(settings, rule, name)),
    )
    ledger.track(
        "redshift:parametergroup",
        name,
        lambda: redshift.delete_cluster_parameter_group(ParameterGroupName=name),
    )
    redshift.modify_cluster_parameter_group(
        ParameterGroupName=name,
        Parameters=[{"ParameterName": "require_ssl", "ParameterValue": "false", "ApplyType": "static"}],
    )
    return name


def require_ssl_value(redshift: Any, parameter_group: str) -> Optional[str]:
    for page in redshift.get_paginator("describe_cluster_parameters").paginate(ParameterGroupName=parameter_group):
        for parameter in page.get("Parameters", []):
            if parameter["ParameterName"] == "require_ssl":
                return parameter.get("ParameterValue")
    return None


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    parameter_group = create_parameter_group(settings, clients, ledger, rule=META["rule"])
    cluster = create_redshift_cluster(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="plaintext-cluster",
        ClusterParameterGroupName=parameter_group,
    )
    return {"cluster_id": cluster["ClusterIdentifier"], "parameter_group": parameter_group}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    redshift = clients["redshift"]
    cluster = describe_redshift_cluster(redshift, state["cluster_id"])
    groups = [group["ParameterGroupName"] for group in cluster.get("ClusterParameterGroups", [])]
    values = {group: require_ssl_value(redshift, group) for group in groups}
    return {
        "compliant": bool(values) and all(value == "true" for value in values.values()),
        "evidence": {"cluster_id": state["cluster_id"], "require_ssl": values},
    }
