"""
dms-replication-not-public - publicly accessible DMS replication instance.

DMS needs the account-level ``dms-vpc-role`` to manage the subnet group; it is
created by the console the first time DMS is used and is not touched here.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state, wait_until_gone
from configdrill.provision import create_security_group, default_vpc_id, vpc_subnet_ids
from configdrill.settings import Settings

META = {
    "rule": "dms-replication-not-public",
    "title": "DMS replication instance is public",
    "service": "dms",
    "resource_type": "AWS::DMS::ReplicationInstance",
    "required_env": [],
}


def describe_replication_instance(dms: Any, arn: str) -> Dict[str, Any]:
    instances = dms.describe_replication_instances(
        Filters=[{"Name": "replication-instance-arn", "Values": [arn]}]
    )["ReplicationInstances"]
    return instances[0]


def delete_replication_instance(settings: Settings, dms: Any, arn: str) -> None:
    dms.delete_replication_instance(ReplicationInstanceArn=arn)
    wait_until_gone(
        lambda: describe_replication_instance(dms, arn),
        gone_codes={"ResourceNotFoundFault"},
        label=f"replication instance {arn}",
        **settings.poll_kwargs(factor=4),
    )


def create_replication_subnet_group(
    settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str, vpc_id: str
) -> str:
    dms = clients["dms"]
    name = unique_name("drill-dms-subnets", max_length=255).lower()
    dms.create_replication_subnet_group(
        ReplicationSubnetGroupIdentifier=name,
        ReplicationSubnetGroupDescription=f"config-drill {rule}",
        SubnetIds=vpc_subnet_ids(settings, clients, vpc_id)[:2],
        Tags=tag_list(drill_tags(settings, rule, name)),
    )
    ledger.track(
        "dms:subgrp",
        name,
        lambda: dms.delete_replication_subnet_group(ReplicationSubnetGroupIdentifier=name),
    )
    return name


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    dms = clients["dms"]
    vpc_id = default_vpc_id(settings, clients)
    subnet_group = create_replication_subnet_group(settings, clients, ledger, rule=META["rule"], vpc_id=vpc_id)
    group_id = create_security_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="dms-replication-sg",
        description="config-drill DMS replication instance",
        vpc_id=vpc_id,
    )
    identifier = unique_name("public-replication", max_length=63).lower()
    instance = dms.create_replication_instance(
        ReplicationInstanceIdentifier=identifier,
        ReplicationInstanceClass="dms.t3.micro",
        AllocatedStorage=20,
        ReplicationSubnetGroupIdentifier=subnet_group,
        VpcSecurityGroupIds=[group_id],
        PubliclyAccessible=True,
        MultiAZ=False,
        Tags=tag_list(drill_tags(settings, META["rule"], identifier)),
    )["ReplicationInstance"]
    arn = instance["ReplicationInstanceArn"]
    ledger.track("dms:rep", identifier, lambda: delete_replication_instance(settings, dms, arn), arn=arn)
    wait_for_state(
        lambda: describe_replication_instance(dms, arn),
        target={"available"},
        status_of=lambda r: r["ReplicationInstanceStatus"],
        failure_states={"failed"},
        label=f"replication instance {identifier}",
        **settings.poll_kwargs(factor=4),
    )
    return {"replication_instance_arn": arn, "identifier": identifier}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    instance = describe_replication_instance(clients["dms"], state["replication_instance_arn"])
    public = bool(instance.get("PubliclyAccessible"))
    return {
        "compliant": not public,
        "evidence": {
            "identifier": state["identifier"],
            "publicly_accessible": public,
            "public_ips": [ip for ip in instance.get("ReplicationInstancePublicIpAddresses", []) if ip],
        },
    }
