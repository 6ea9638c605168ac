"""
redshift-cluster-configuration-check - cluster without encryption or audit logging.

The managed rule checks three things: encryption at rest, audit logging and
the node type. Only the first two are evaluated here.
"""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_redshift_cluster, describe_redshift_cluster
from configdrill.settings import Settings

META = {
    "rule": "redshift-cluster-configuration-check",
    "title": "Redshift cluster unencrypted without audit logging",
    "service": "redshift",
    "resource_type": "AWS::Redshift::Cluster",
    "required_env": [],
}


def configuration_issues(cluster: Dict[str, Any], logging_status: Dict[str, Any]) -> List[str]:
    issues = []
    if not cluster.get("Encrypted"):
        issues.append("cluster is not encrypted")
    if not logging_status.get("LoggingEnabled"):
        issues.append("audit logging is disabled")
    return issues


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    cluster = create_redshift_cluster(
        settings, clients, ledger, rule=META["rule"], prefix="unaudited-cluster", Encrypted=False
    )
    return {"cluster_id": cluster["ClusterIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    redshift = clients["redshift"]
    cluster = describe_redshift_cluster(redshift, state["cluster_id"])
    logging_status = redshift.describe_logging_status(ClusterIdentifier=state["cluster_id"])
    issues = configuration_issues(cluster, logging_status)
    return {"compliant": not issues, "evidence": {"cluster_id": state["cluster_id"], "issues": issues}}
