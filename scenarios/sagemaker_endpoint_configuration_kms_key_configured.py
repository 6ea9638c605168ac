"""
sagemaker-endpoint-configuration-kms-key-configured - endpoint configuration without a KMS key.

Only the model and the endpoint configuration are created; no endpoint is
deployed, so no inference instance is ever launched.
"""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.naming import drill_tags, tag_list, unique_name
from configdrill.provision import retry_until_accepted
from configdrill.settings import Settings

from scenarios.sagemaker_notebook_no_direct_internet_access import ROLE_NOT_READY, create_execution_role

META = {
    "rule": "sagemaker-endpoint-configuration-kms-key-configured",
    "title": "SageMaker endpoint configuration has no KMS key",
    "service": "sagemaker",
    "resource_type": "AWS::SageMaker::EndpointConfig",
    "required_env": [],
}

# AWS deep learning container registry account
INFERENCE_IMAGE = "763104351884.dkr.ecr.{region}.amazonaws.com/pytorch-inference:2.1.0-cpu-py310"


def create_model(settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger, *, rule: str) -> str:
    sagemaker = clients["sagemaker"]
    role_arn = create_execution_role(settings, clients, ledger, rule=rule)
    name = unique_name("drill-model", max_length=63)
    retry_until_accepted(
        lambda: sagemaker.create_model(
            ModelName=name,
            PrimaryContainer={"Image": INFERENCE_IMAGE.format(region=settings.aws_region)},
            ExecutionRoleArn=role_arn,
            Tags=tag_list(drill_tags(settings, rule)),
        ),
        settings,
        codes={"ValidationException"},
        message_pattern=ROLE_NOT_READY,
        label=f"model {name}",
    )
    ledger.track("sagemaker:model", name, lambda: sagemaker.delete_model(ModelName=name))
    return name


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    sagemaker = clients["sagemaker"]
    model = create_model(settings, clients, ledger, rule=META["rule"])
    name = unique_name("unencrypted-endpoint-config", max_length=63)
    sagemaker.create_endpoint_config(
        EndpointConfigName=name,
        ProductionVariants=[
            {
                "VariantName": "primary",
                "ModelName": model,
                "InstanceType": "ml.t2.medium",
                "InitialInstanceCount": 1,
            }
        ],
        Tags=tag_list(drill_tags(settings, META["rule"])),
    )
    ledger.track(
        "sagemaker:endpoint-config", name, lambda: sagemaker.delete_endpoint_config(EndpointConfigName=name)
    )
    return {"endpoint_config": name, "model": model}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    config = clients["sagemaker"].describe_endpoint_config(EndpointConfigName=state["endpoint_config"])
    key_id = config.get("KmsKeyId")
    return {"compliant": bool(key_id), "evidence": {"endpoint_config": state["endpoint_config"], "kms_key_id": key_id}}
