"""ecs-task-definition-user-for-host-mode-check - host networking container running as root."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.provision import ignore_missing
from configdrill.settings import Settings

META = {
    "rule": "ecs-task-definition-user-for-host-mode-check",
    "title": "ECS host-mode task definition runs as root",
    "service": "ecs",
    "resource_type": "AWS::ECS::TaskDefinition",
    "required_env": [],
}


def delete_task_definition(ecs: Any, arn: str) -> None:
    ignore_missing(ecs.deregister_task_definition, taskDefinition=arn)
    ecs.delete_task_definitions(taskDefinitions=[arn])


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    ecs = clients["ecs"]
    family = unique_name("host-root-task", max_length=255)
    definition = ecs.register_task_definition(
        family=family,
        networkMode="host",
        requiresCompatibilities=["EC2"],
        cpu="256",
        memory="512",
        containerDefinitions=[
            {
                "name": "web",
                "image": "nginx:latest",
                "cpu": 256,
                "memory": 256,
                "essential": True,
                "user": "root",
                "privileged": False,
            }
        ],
        tags=tag_list(drill_tags(settings, META["rule"]), "key", "value"),
    )["taskDefinition"]
    arn = definition["taskDefinitionArn"]
    ledger.track("ecs:task-definition", family, lambda: delete_task_definition(ecs, arn), arn=arn)
    return {"task_definition_arn": arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    definition = clients["ecs"].describe_task_definition(taskDefinition=state["task_definition_arn"])[
        "taskDefinition"
    ]
    root_containers = [
        container["name"]
        for container in definition.get("containerDefinitions", [])
        if not container.get("privileged") and container.get("user") in (None, "", "root", "0")
    ]
    host_mode = definition.get("networkMode") == "host"
    return {
        "compliant": not (host_mode and root_containers),
        "evidence": {
            "task_definition_arn": state["task_definition_arn"],
            "network_mode": definition.get("networkMode"),
            "root_containers": root_containers,
        },
    }
