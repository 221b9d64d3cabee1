from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, TypeVar
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from cloudwatch_auto.errorlib import ProviderQueryError
from cloudwatch_auto.loglib import logger

# Configuration for retries
config = Config(
    retries={
        'max_attempts': 10,
        'mode': 'standard'
    }
)

# In-flight request cap for batched tag and statistics lookups
DEFAULT_CONCURRENCY = 2

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class ProviderClients:
    """
    The boto3 clients one run talks to, all bound to the same region.

    Attributes:
        ec2: EC2 client (instances and their tags).
        rds: RDS client (DB instances and their tags).
        elbv2: Elastic Load Balancing v2 client.
        redshift: Redshift client (clusters and their tags).
        cloudwatch: CloudWatch client (statistics and alarms).
        sns: SNS client (topic listing).
        sts: STS client (caller identity).
    """
    ec2: Any
    rds: Any
    elbv2: Any
    redshift: Any
    cloudwatch: Any
    sns: Any
    sts: Any


def start_clients(region: str, session: boto3.Session | None = None) -> ProviderClients:
    """
    Initializes every provider client for a region from one boto3 session.

    Args:
        region (str): The AWS region to access.
        session (boto3.Session): Session to build clients from. A default session is used if omitted.

    Returns:
        ProviderClients: The client bundle for this run.
    """
    session = session or boto3.Session()
    clients = ProviderClients(
        **{
            name: session.client(service, region_name=region, config=config)
            for name, service in (
                ("ec2", "ec2"),
                ("rds", "rds"),
                ("elbv2", "elbv2"),
                ("redshift", "redshift"),
                ("cloudwatch", "cloudwatch"),
                ("sns", "sns"),
                ("sts", "sts"),
            )
        }
    )
    logger.info(f"Started Boto3 clients in region: {region}")
    return clients


def map_bounded(func: Callable[[T], R], items: Iterable[T], limit: int = DEFAULT_CONCURRENCY) -> list[R]:
    """
    Applies ``func`` to every item with at most ``limit`` calls in flight.

    Results keep the order of ``items``. The first exception raised by ``func``
    is re-raised once the in-flight calls have finished.

    Args:
        func (Callable): The blocking call to make per item.
        items (Iterable): Inputs, one call each.
        limit (int): Maximum number of concurrent calls.

    Returns:
        list: One result per item, in input order.
    """
    items = list(items)
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=limit) as pool:
        return list(pool.map(func, items))


def get_account_id(sts) -> str:
    """
    Resolves the AWS account the credentials belong to.

    Raises:
        ProviderQueryError: If GetCallerIdentity fails or returns no account.
    """
    try:
        account_id = sts.get_caller_identity().get("Account")
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Could not get user info from STS: {e}")
        raise ProviderQueryError("Could not get user info from STS.", "GetCallerIdentity", e) from e
    if not account_id:
        raise ProviderQueryError("Could not get user info from STS.", "GetCallerIdentity")
    logger.info(f"AWS Account ID: {account_id}")
    return account_id


def list_topic_arns(sns) -> list[str]:
    """
    Lists the ARN of every SNS topic in the region.

    Raises:
        ProviderQueryError: If ListTopics fails.
    """
    try:
        arns: list[str] = []
        for page in sns.get_paginator("list_topics").paginate():
            arns.extend(topic.get("TopicArn") or "No ARN" for topic in page.get("Topics", []))
        return arns
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Could not list SNS topics: {e}")
        raise ProviderQueryError("Could not list SNS topics", "ListTopics", e) from e
