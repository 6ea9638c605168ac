"""autoscaling-group-elb-healthcheck-required - group behind a load balancer using EC2 health checks."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import default_vpc_id
from configdrill.settings import Settings

from scenarios.autoscaling_launch_config_public_ip_disabled import (
    create_auto_scaling_group,
    create_launch_template,
    describe_group,
)
from scenarios.elb_deletion_protection_enabled import create_target_group

META = {
    "rule": "autoscaling-group-elb-healthcheck-required",
    "title": "Auto Scaling group ignores load balancer health checks",
    "service": "autoscaling",
    "resource_type": "AWS::AutoScaling::AutoScalingGroup",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    vpc_id = default_vpc_id(settings, clients)
    target_arn = create_target_group(settings, clients, ledger, rule=META["rule"], prefix="ec2-check-tg")[
        "TargetGroupArn"
    ]
    template_id = create_launch_template(settings, clients, ledger, rule=META["rule"], prefix="ec2-check-template")
    group_name = create_auto_scaling_group(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="ec2-check-asg",
        template_id=template_id,
        vpc_id=vpc_id,
        TargetGroupARNs=[target_arn],
        HealthCheckType="EC2",
    )
    return {"auto_scaling_group": group_name, "target_group_arn": target_arn}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    group = describe_group(clients["autoscaling"], state["auto_scaling_group"])
    attached = bool(group.get("TargetGroupARNs") or group.get("LoadBalancerNames"))
    check = group.get("HealthCheckType")
    return {
        "compliant": not attached or check == "ELB",
        "evidence": {
            "auto_scaling_group": state["auto_scaling_group"],
            "health_check_type": check,
            "attached": attached,
        },
    }
