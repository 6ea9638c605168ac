"""
beanstalk-enhanced-health-reporting-enabled - environment reporting basic health only.

Also home to the environment helpers shared with the managed-updates drill:
each environment gets its own application, EC2 instance profile and service
role, all removed with it.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.polling import wait_for_state
from configdrill.provision import create_instance_profile, create_role, retry_until_accepted
from configdrill.settings import Settings

META = {
    "rule": "beanstalk-enhanced-health-reporting-enabled",
    "title": "Elastic Beanstalk basic health reporting",
    "service": "elasticbeanstalk",
    "resource_type": "AWS::ElasticBeanstalk::Environment",
    "required_env": [],
    "hold_seconds": 30,
}

WEB_TIER_POLICY_ARN = "arn:aws:iam::aws:policy/AWSElasticBeanstalkWebTier"
SERVICE_POLICY_ARNS = (
    "arn:aws:iam::aws:policy/service-role/AWSElasticBeanstalkEnhancedHealth",
    "arn:aws:iam::aws:policy/AWSElasticBeanstalkManagedUpdatesCustomerRolePolicy",
)
SOLUTION_STACK_PATTERN = re.compile(r"^64bit Amazon Linux 2023 .* running Python")
HEALTH_NAMESPACE = "aws:elasticbeanstalk:healthreporting:system"
# the profile is rejected until IAM has propagated it
PROFILE_NOT_READY = r"instance profile"


def option(namespace: str, name: str, value: str) -> Dict[str, str]:
    return {"Namespace": namespace, "OptionName": name, "Value": value}


def solution_stack(beanstalk: Any) -> str:
    """Newest Amazon Linux 2023 Python platform; the API lists newest first."""
    for stack in beanstalk.list_available_solution_stacks().get("SolutionStacks", []):
        if SOLUTION_STACK_PATTERN.match(stack):
            return stack
    raise RuntimeError("No Amazon Linux 2023 Python solution stack available")


def describe_environment(beanstalk: Any, environment_id: str) -> Dict[str, Any]:
    environments = beanstalk.describe_environments(EnvironmentIds=[environment_id], IncludeDeleted=True)
    return environments["Environments"][0]


def terminate_environment(settings: Settings, beanstalk: Any, environment_id: str) -> None:
    beanstalk.terminate_environment(EnvironmentId=environment_id)
    wait_for_state(
        lambda: describe_environment(beanstalk, environment_id),
        target="Terminated",
        status_of=lambda e: e["Status"],
        label=f"environment {environment_id} termination",
        **settings.poll_kwargs(factor=6),
    )


def create_application(settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str) -> str:
    beanstalk = clients["elasticbeanstalk"]
    name = unique_name("drill-app", max_length=100)
    application = beanstalk.create_application(
        ApplicationName=name,
        Description=f"config-drill {rule}",
        Tags=tag_list(drill_tags(settings, rule, name)),
    )["Application"]
    ledger.track(
        "elasticbeanstalk:application",
        name,
        lambda: beanstalk.delete_application(ApplicationName=name, TerminateEnvByForce=True),
        arn=application.get("ApplicationArn"),
    )
    return name


def create_environment(
    settings: Settings,
    clients: Dict[str, Any],
    ledger: ResourceLedger,
    *,
    rule: str,
    prefix: str,
    options: List[Mapping[str, str]],
) -> Dict[str, Any]:
    """Single-instance environment on the sample application, returned once Ready."""
    beanstalk = clients["elasticbeanstalk"]
    application = create_application(settings, clients, ledger, rule=rule)
    profile = create_instance_profile(
        settings, clients, ledger, rule=rule, prefix="beanstalk-ec2", managed_policy_arns=[WEB_TIER_POLICY_ARN]
    )
    service_role = create_role(
        settings,
        clients,
        ledger,
        rule=rule,
        prefix="beanstalk-service",
        service="elasticbeanstalk.amazonaws.com",
        managed_policy_arns=SERVICE_POLICY_ARNS,
    )
    name = unique_name(prefix, max_length=40)
    settings_options = [
        option("aws:autoscaling:launchconfiguration", "IamInstanceProfile", profile["InstanceProfileName"]),
        option("aws:autoscaling:launchconfiguration", "InstanceType", "t3.micro"),
        option("aws:elasticbeanstalk:environment", "EnvironmentType", "SingleInstance"),
        option("aws:elasticbeanstalk:environment", "ServiceRole", service_role["Arn"]),
        *options,
    ]
    environment = retry_until_accepted(
        lambda: beanstalk.create_environment(
            ApplicationName=application,
            EnvironmentName=name,
            SolutionStackName=solution_stack(beanstalk),
            OptionSettings=settings_options,
            Tags=tag_list(drill_tags(settings, rule, name)),
        ),
        settings,
        codes={"InvalidParameterValue"},
        message_pattern=PROFILE_NOT_READY,
        label=f"environment {name}",
    )
    environment_id = environment["EnvironmentId"]
    ledger.track(
        "elasticbeanstalk:environment",
        environment_id,
        lambda: terminate_environment(settings, beanstalk, environment_id),
        arn=environment.get("EnvironmentArn"),
        note=name,
    )
    return wait_for_state(
        lambda: describe_environment(beanstalk, environment_id),
        target="Ready",
        status_of=lambda e: e["Status"],
        failure_states={"Terminating", "Terminated"},
        label=f"environment {name}",
        **settings.poll_kwargs(factor=6),
    )


def option_value(beanstalk: Any, environment: Dict[str, Any], namespace: str, name: str) -> str:
    response = beanstalk.describe_configuration_settings(
        ApplicationName=environment["ApplicationName"], EnvironmentName=environment["EnvironmentName"]
    )
    for configuration in response.get("ConfigurationSettings", []):
        for setting in configuration.get("OptionSettings", []):
            if setting["Namespace"] == namespace and setting["OptionName"] == name:
                return setting.get("Value", "")
    return ""


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    environment = create_environment(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="basic-health-env",
        options=[option(HEALTH_NAMESPACE, "SystemType", "basic")],
    )
    return {"environment_id": environment["EnvironmentId"]}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    beanstalk = clients["elasticbeanstalk"]
    environment = describe_environment(beanstalk, state["environment_id"])
    system_type = option_value(beanstalk, environment, HEALTH_NAMESPACE, "SystemType")
    return {
        "compliant": system_type == "enhanced",
        "evidence": {"environment_id": state["environment_id"], "health_system_type": system_type},
    }
