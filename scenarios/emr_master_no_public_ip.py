"""emr-master-no-public-ip - cluster launched into a public subnet."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state
from configdrill.settings import Settings

META = {
    "rule": "emr-master-no-public-ip",
    "title": "EMR master node has a public IP",
    "service": "emr",
    "resource_type": "AWS::EMR::Cluster",
    "required_env": ["SUBNET_IDS"],
    "hold_seconds": 30,
}

RELEASE_LABEL = "emr-6.15.0"
INSTANCE_TYPE = "m5.xlarge"
RUNNING_STATES = {"WAITING", "RUNNING"}
FAILED_STATES = {"TERMINATED", "TERMINATED_WITH_ERRORS", "TERMINATING"}


def _cluster_state(response: Dict[str, Any]) -> str:
    return response["Cluster"]["Status"]["State"]


def terminate_cluster(settings: Settings, emr: Any, cluster_id: str) -> None:
    emr.terminate_job_flows(JobFlowIds=[cluster_id])
    wait_for_state(
        lambda: emr.describe_cluster(ClusterId=cluster_id),
        target={"TERMINATED", "TERMINATED_WITH_ERRORS"},
        status_of=_cluster_state,
        label=f"cluster {cluster_id} termination",
        **settings.poll_kwargs(factor=4),
    )


def launch_cluster(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    subnet_id: Optional[str] = None,
    security_configuration: Optional[str] = None,
) -> str:
    """Start a single-node Hadoop cluster and wait until it is idle. Without a subnet EMR uses the default VPC."""
    emr = clients["emr"]
    name = unique_name(prefix)
    request: Dict[str, Any] = {
        "Name": name,
        "ReleaseLabel": RELEASE_LABEL,
        "Applications": [{"Name": "Hadoop"}],
        "Instances": {
            "InstanceGroups": [
                {"InstanceRole": "MASTER", "InstanceType": INSTANCE_TYPE, "InstanceCount": 1},
            ],
            "KeepJobFlowAliveWhenNoSteps": True,
            "TerminationProtected": False,
        },
        "JobFlowRole": "EMR_EC2_DefaultRole",
        "ServiceRole": "EMR_DefaultRole",
        "VisibleToAllUsers": True,
        "Tags": tag_list(drill_tags(settings, rule, name)),
    }
    if subnet_id:
        request["Instances"]["Ec2SubnetId"] = subnet_id
    if settings.custom_ami_id:
        request["CustomAmiId"] = settings.custom_ami_id
    if security_configuration:
        request["SecurityConfiguration"] = security_configuration
    response = emr.run_job_flow(**request)
    cluster_id = response["JobFlowId"]
    ledger.track(
        "emr:cluster",
        cluster_id,
        lambda: terminate_cluster(settings, emr, cluster_id),
        arn=response.get("ClusterArn"),
        note=name,
    )
    wait_for_state(
        lambda: emr.describe_cluster(ClusterId=cluster_id),
        target=RUNNING_STATES,
        status_of=_cluster_state,
        failure_states=FAILED_STATES,
        label=f"cluster {cluster_id}",
        **settings.poll_kwargs(factor=4),
    )
    return cluster_id


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    cluster_id = launch_cluster(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="public-master-cluster",
        subnet_id=settings.subnet_ids[0],
        security_configuration=settings.security_configuration,
    )
    return {"cluster_id": cluster_id}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    instances: List[Dict[str, Any]] = clients["emr"].list_instances(
        ClusterId=state["cluster_id"], InstanceGroupTypes=["MASTER"]
    ).get("Instances", [])
    public_ips = [instance["PublicIpAddress"] for instance in instances if instance.get("PublicIpAddress")]
    return {
        "compliant": not public_ips,
        "evidence": {"cluster_id": state["cluster_id"], "master_public_ips": len(public_ips)},
    }
