"""redshift-backup-enabled - cluster with automated snapshots disabled."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_redshift_cluster, describe_redshift_cluster
from configdrill.settings import Settings

META = {
    "rule": "redshift-backup-enabled",
    "title": "Redshift automated snapshots disabled",
    "service": "redshift",
    "resource_type": "AWS::Redshift::Cluster",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    cluster = create_redshift_cluster(
        settings, clients, ledger, rule=META["rule"], prefix="no-backup-cluster", AutomatedSnapshotRetentionPeriod=0
    )
    return {"cluster_id": cluster["ClusterIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    cluster = describe_redshift_cluster(clients["redshift"], state["cluster_id"])
    retention = cluster.get("AutomatedSnapshotRetentionPeriod", 0)
    return {"compliant": retention > 0, "evidence": {"cluster_id": state["cluster_id"], "retention_days": retention}}
