from dataclasses import replace
from typing import Any
import jmespath
from botocore.exceptions import BotoCoreError, ClientError
from cloudwatch_auto.clientlib import map_bounded
from cloudwatch_auto.errorlib import ProviderQueryError
from cloudwatch_auto.loglib import logger
from cloudwatch_auto.resource_model import DbInstance, Ec2Instance, LoadBalancer, RedshiftCluster
from cloudwatch_auto.taglib import has_marker_tag, marker_tag

# describe_tags accepts at most 20 load balancer ARNs per call
ELB_TAG_BATCH_SIZE = 20


def paginate(client: Any, method: str, pattern: str, operation: str, **kwargs) -> list:
    """
    Runs a paginated describe/list call and flattens every page with a JMESPath pattern.

    Args:
        client (boto3.client): The client owning the operation.
        method (str): Paginator name, e.g. ``describe_instances``.
        pattern (str): JMESPath expression selecting items from one page.
        operation (str): Provider operation name used in errors.

    Returns:
        list: Items from all pages, in provider order.

    Raises:
        ProviderQueryError: If any page request fails.
    """
    try:
        items: list = []
        for page in client.get_paginator(method).paginate(**kwargs):
            items.extend(jmespath.search(pattern, page) or [])
        return items
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to call {operation}: {e}")
        raise ProviderQueryError(f"Failed to call {operation}", operation, e) from e


def reject_tagged(resources: list, label: str, describe) -> list:
    """Drops resources carrying the marker tag and logs what is left."""
    untagged = [resource for resource in resources if not has_marker_tag(resource.tags)]
    logger.info(f"Found {len(untagged)} {label} without {marker_tag} tag.")
    for resource in untagged:
        logger.info(f"ID: {describe(resource)}")
    return untagged


def list_ec2_instances(ec2) -> list[Ec2Instance]:
    """Lists EC2 instances (tags come inline) that are not yet covered."""
    logger.info("Describing EC2 instances...")
    instances = [
        Ec2Instance.from_response(item)
        for item in paginate(ec2, "describe_instances", "Reservations[].Instances[]", "DescribeInstances")
    ]
    return reject_tagged(instances, "EC2 instances", lambda instance: instance.instance_id)


def fetch_rds_tags(rds, instance: DbInstance) -> DbInstance:
    """
    Retrieves the tags of one DB instance.

    Raises:
        ProviderQueryError: If ListTagsForResource fails.
    """
    try:
        response = rds.list_tags_for_resource(ResourceName=instance.arn)
        return replace(instance, tags=response.get("TagList") or [])
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to list tags for {instance.arn}: {e}")
        raise ProviderQueryError(f"Failed to list tags for {instance.arn}", "ListTagsForResource", e) from e


def list_rds_instances(rds) -> list[DbInstance]:
    """Lists RDS DB instances that are not yet covered, two tag lookups at a time."""
    logger.info("Describing RDS instances...")
    instances = [
        DbInstance.from_response(item)
        for item in paginate(rds, "describe_db_instances", "DBInstances", "DescribeDBInstances")
    ]
    tagged = map_bounded(lambda instance: fetch_rds_tags(rds, instance), instances)
    return reject_tagged(tagged, "RDS instances", lambda instance: instance.arn)


def fetch_elb_tags(elbv2, arns: list[str]) -> list[dict]:
    """
    Retrieves tag descriptions for one batch of load balancer ARNs.

    Raises:
        ProviderQueryError: If DescribeTags fails.
    """
    try:
        response = elbv2.describe_tags(ResourceArns=arns)
        return response.get("TagDescriptions") or []
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to describe tags for {len(arns)} load balancers: {e}")
        raise ProviderQueryError("Failed to describe load balancer tags", "DescribeTags", e) from e


def list_load_balancers(elbv2) -> list[LoadBalancer]:
    """Lists ELBv2 load balancers that are not yet covered, tagged in batches of 20."""
    logger.info("Describing ELB/ALB instances...")
    items = paginate(elbv2, "describe_load_balancers", "LoadBalancers", "DescribeLoadBalancers")
    load_balancers = [LoadBalancer.from_response(item) for item in items]
    if not load_balancers:
        logger.info(f"Found 0 load balancers without {marker_tag} tag.")
        return []

    arns = [load_balancer.arn for load_balancer in load_balancers]
    batches = [arns[i:i + ELB_TAG_BATCH_SIZE] for i in range(0, len(arns), ELB_TAG_BATCH_SIZE)]
    descriptions = [
        description
        for batch in map_bounded(lambda batch: fetch_elb_tags(elbv2, batch), batches)
        for description in batch
    ]
    tags_by_arn = {description.get("ResourceArn"): description.get("Tags") or [] for description in descriptions}
    tagged = [replace(load_balancer, tags=tags_by_arn.get(load_balancer.arn, [])) for load_balancer in load_balancers]
    return reject_tagged(tagged, "load balancers", lambda load_balancer: load_balancer.arn)


def list_redshift_clusters(redshift) -> list[RedshiftCluster]:
    """Lists Redshift clusters (tags come inline) that are not yet covered."""
    logger.info("Describing Redshift clusters...")
    clusters = [
        RedshiftCluster.from_response(item)
        for item in paginate(redshift, "describe_clusters", "Clusters", "DescribeClusters")
    ]
    return reject_tagged(clusters, "Redshift clusters", lambda cluster: cluster.identifier)
