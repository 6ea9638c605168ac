"""redshift-cluster-maintenancesettings-check - cluster that refuses version upgrades."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_redshift_cluster, describe_redshift_cluster
from configdrill.settings import Settings

META = {
    "rule": "redshift-cluster-maintenancesettings-check",
    "title": "Redshift version upgrades disabled",
    "service": "redshift",
    "resource_type": "AWS::Redshift::Cluster",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    cluster = create_redshift_cluster(
        settings, clients, ledger, rule=META["rule"], prefix="pinned-version-cluster", AllowVersionUpgrade=False
    )
    return {"cluster_id": cluster["ClusterIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    cluster = describe_redshift_cluster(clients["redshift"], state["cluster_id"])
    allowed = bool(cluster.get("AllowVersionUpgrade"))
    return {
        "compliant": allowed and cluster.get("AutomatedSnapshotRetentionPeriod", 0) > 0,
        "evidence": {
            "cluster_id": state["cluster_id"],
            "allow_version_upgrade": allowed,
            "maintenance_window": cluster.get("PreferredMaintenanceWindow"),
            "retention_days": cluster.get("AutomatedSnapshotRetentionPeriod"),
        },
    }
