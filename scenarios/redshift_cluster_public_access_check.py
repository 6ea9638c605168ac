"""redshift-cluster-public-access-check - publicly accessible cluster."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_redshift_cluster, describe_redshift_cluster
from configdrill.settings import Settings

META = {
    "rule": "redshift-cluster-public-access-check",
    "title": "Redshift cluster is public",
    "service": "redshift",
    "resource_type": "AWS::Redshift::Cluster",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    cluster = create_redshift_cluster(
        settings, clients, ledger, rule=META["rule"], prefix="public-cluster", PubliclyAccessible=True
    )
    return {"cluster_id": cluster["ClusterIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    public = bool(describe_redshift_cluster(clients["redshift"], state["cluster_id"]).get("PubliclyAccessible"))
    return {"compliant": not public, "evidence": {"cluster_id": state["cluster_id"], "publicly_accessible": public}}
