"""Registry of drill scenarios keyed by AWS Config rule name."""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Dict, List

_MODULE_NAMES: List[str] = [
    "scenarios.access_keys_rotated",
    "scenarios.acm_certificate_expiration_check",
    "scenarios.alb_http_to_https_redirection_check",
    "scenarios.alb_waf_enabled",
    "scenarios.api_gw_associated_with_waf",
    "scenarios.api_gw_cache_enabled_and_encrypted",
    "scenarios.api_gw_execution_logging_enabled",
    "scenarios.api_gw_ssl_enabled",
    "scenarios.autoscaling_group_elb_healthcheck_required",
    "scenarios.autoscaling_launch_config_public_ip_disabled",
    "scenarios.beanstalk_enhanced_health_reporting_enabled",
    "scenarios.cloud_trail_cloud_watch_logs_enabled",
    "scenarios.cloud_trail_encryption_enabled",
    "scenarios.cloud_trail_log_file_validation_enabled",
    "scenarios.cloudtrail_enabled",
    "scenarios.cloudtrail_s3_dataevents_enabled",
    "scenarios.cloudtrail_security_trail_enabled",
    "scenarios.cloudwatch_log_group_encrypted",
    "scenarios.cmk_backing_key_rotation_enabled",
    "scenarios.codebuild_project_envvar_awscred_check",
    "scenarios.codebuild_project_source_repo_url_check",
    "scenarios.cw_loggroup_retention_period_check",
    "scenarios.db_instance_backup_enabled",
    "scenarios.dms_replication_not_public",
    "scenarios.dynamodb_autoscaling_enabled",
    "scenarios.dynamodb_in_backup_plan",
    "scenarios.dynamodb_pitr_enabled",
    "scenarios.dynamodb_table_encrypted_kms",
    "scenarios.ebs_in_backup_plan",
    "scenarios.ebs_optimized_instance",
    "scenarios.ebs_snapshot_public_restorable_check",
    "scenarios.ec2_ebs_encryption_by_default",
    "scenarios.ec2_imdsv2_check",
    "scenarios.ec2_instance_managed_by_systems_manager",
    "scenarios.ec2_instance_no_public_ip",
    "scenarios.ec2_instance_profile_attached",
    "scenarios.ec2_instances_in_vpc",
    "scenarios.ec2_managedinstance_association_compliance_status_check",
    "scenarios.ec2_managedinstance_patch_compliance_status_check",
    "scenarios.ecs_task_definition_user_for_host_mode_check",
    "scenarios.efs_encrypted_check",
    "scenarios.efs_in_backup_plan",
    "scenarios.elastic_beanstalk_managed_updates_enabled",
    "scenarios.elasticache_redis_cluster_automatic_backup_check",
    "scenarios.elasticsearch_encrypted_at_rest",
    "scenarios.elasticsearch_in_vpc_only",
    "scenarios.elasticsearch_logs_to_cloudwatch",
    "scenarios.elasticsearch_node_to_node_encryption_check",
    "scenarios.elb_acm_certificate_required",
    "scenarios.elb_cross_zone_load_balancing_enabled",
    "scenarios.elb_deletion_protection_enabled",
    "scenarios.elb_logging_enabled",
    "scenarios.elb_tls_https_listeners_only",
    "scenarios.elbv2_acm_certificate_required",
    "scenarios.emr_kerberos_enabled",
    "scenarios.emr_master_no_public_ip",
    "scenarios.encrypted_volumes",
    "scenarios.guardduty_enabled_centralized",
    "scenarios.iam_customer_policy_blocked_kms_actions",
    "scenarios.iam_group_has_users_check",
    "scenarios.iam_inline_policy_blocked_kms_actions",
    "scenarios.iam_no_inline_policy_check",
    "scenarios.iam_password_policy",
    "scenarios.iam_policy_no_statements_with_admin_access",
    "scenarios.iam_policy_no_statements_with_full_access",
    "scenarios.iam_user_group_membership_check",
    "scenarios.iam_user_mfa_enabled",
    "scenarios.iam_user_no_policies_check",
    "scenarios.iam_user_unused_credentials_check",
    "scenarios.kms_cmk_not_scheduled_for_deletion",
    "scenarios.lambda_function_public_access_prohibited",
    "scenarios.lambda_inside_vpc",
    "scenarios.mfa_enabled_for_iam_console_access",
    "scenarios.multi_region_cloudtrail_enabled",
    "scenarios.no_unrestricted_route_to_igw",
    "scenarios.opensearch_data_node_fault_tolerance",
    "scenarios.opensearch_encrypted_at_rest",
    "scenarios.opensearch_https_required",
    "scenarios.opensearch_in_vpc_only",
    "scenarios.opensearch_logs_to_cloudwatch",
    "scenarios.opensearch_node_to_node_encryption_check",
    "scenarios.rds_automatic_minor_version_upgrade_enabled",
    "scenarios.rds_in_backup_plan",
    "scenarios.rds_instance_deletion_protection_enabled",
    "scenarios.rds_instance_public_access_check",
    "scenarios.rds_logging_enabled",
    "scenarios.rds_snapshot_encrypted",
    "scenarios.rds_snapshots_public_prohibited",
    "scenarios.rds_storage_encrypted",
    "scenarios.redshift_backup_enabled",
    "scenarios.redshift_cluster_configuration_check",
    "scenarios.redshift_cluster_kms_enabled",
    "scenarios.redshift_cluster_maintenancesettings_check",
    "scenarios.redshift_cluster_public_access_check",
    "scenarios.redshift_require_tls_ssl",
    "scenarios.restricted_common_ports",
    "scenarios.restricted_ssh",
    "scenarios.s3_account_level_public_access_blocks_periodic",
    "scenarios.s3_bucket_level_public_access_prohibited",
    "scenarios.s3_bucket_logging_enabled",
    "scenarios.s3_bucket_policy_grantee_check",
    "scenarios.s3_bucket_public_read_prohibited",
    "scenarios.s3_bucket_public_write_prohibited",
    "scenarios.s3_bucket_replication_enabled",
    "scenarios.s3_bucket_server_side_encryption_enabled",
    "scenarios.s3_bucket_ssl_requests_only",
    "scenarios.s3_bucket_versioning_enabled",
    "scenarios.s3_default_encryption_kms",
    "scenarios.sagemaker_endpoint_configuration_kms_key_configured",
    "scenarios.sagemaker_notebook_instance_kms_key_configured",
    "scenarios.sagemaker_notebook_no_direct_internet_access",
    "scenarios.secretsmanager_rotation_enabled_check",
    "scenarios.secretsmanager_scheduled_rotation_success_check",
    "scenarios.secretsmanager_secret_periodic_rotation",
    "scenarios.secretsmanager_secret_unused",
    "scenarios.secretsmanager_using_cmk",
    "scenarios.sns_encrypted_kms",
    "scenarios.ssm_document_not_public",
    "scenarios.subnet_auto_assign_public_ip_disabled",
    "scenarios.vpc_default_security_group_closed",
    "scenarios.vpc_flow_logs_enabled",
    "scenarios.vpc_sg_open_only_to_authorized_ports",
    "scenarios.vpc_vpn_2_tunnels_up",
    "scenarios.wafv2_logging_enabled",
]

MODULE_NAMES = list(_MODULE_NAMES)


def _load_modules() -> List[ModuleType]:
    modules = []
    for name in _MODULE_NAMES:
        modules.append(importlib.import_module(name))
    return modules


def _build_registry() -> Dict[str, ModuleType]:
    registry: Dict[str, ModuleType] = {}
    for module in _load_modules():
        meta = getattr(module, "META", {})
        rule = meta.get("rule")
        if not rule or not callable(getattr(module, "provision", None)):
            continue
        if rule in registry:
            raise ValueError(f"Duplicate scenario for rule {rule}: {module.__name__}")
        registry[rule] = module
    return registry


def scenarios_for_service(service: str) -> Dict[str, ModuleType]:
    service = service.strip().lower()
    return {rule: module for rule, module in SCENARIO_REGISTRY.items() if module.META.get("service") == service}


SCENARIO_REGISTRY: Dict[str, ModuleType] = _build_registry()
