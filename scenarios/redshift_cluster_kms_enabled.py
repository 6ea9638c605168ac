"""redshift-cluster-kms-enabled - cluster not encrypted with a KMS key."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_redshift_cluster, describe_redshift_cluster
from configdrill.settings import Settings

META = {
    "rule": "redshift-cluster-kms-enabled",
    "title": "Redshift cluster without KMS encryption",
    "service": "redshift",
    "resource_type": "AWS::Redshift::Cluster",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    cluster = create_redshift_cluster(
        settings, clients, ledger, rule=META["rule"], prefix="no-kms-cluster", Encrypted=False
    )
    return {"cluster_id": cluster["ClusterIdentifier"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    cluster = describe_redshift_cluster(clients["redshift"], state["cluster_id"])
    encrypted = bool(cluster.get("Encrypted"))
    key_id = cluster.get("KmsKeyId")
    return {
        "compliant": encrypted and bool(key_id),
        "evidence": {"cluster_id": state["cluster_id"], "encrypted": encrypted, "kms_key_id": key_id},
    }
