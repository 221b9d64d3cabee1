from datetime import datetime, timedelta, timezone
import jmespath
from botocore.exceptions import BotoCoreError, ClientError
from cloudwatch_auto.clientlib import map_bounded
from cloudwatch_auto.errorlib import ProviderQueryError
from cloudwatch_auto.loglib import logger
from cloudwatch_auto.resource_model import LoadBalancer, LoadBalancerWithStatistics

WINDOW = timedelta(hours=24)
PERIOD = 60


def get_datapoints(cloudwatch, dimension: str, metric_name: str, statistic: str,
                   start_time: datetime, end_time: datetime) -> list:
    """
    Retrieves one statistic of an Application ELB metric over a time window.

    Args:
        cloudwatch (boto3.client): CloudWatch client instance.
        dimension (str): The ``LoadBalancer`` dimension value.
        metric_name (str): e.g. ``TargetResponseTime``.
        statistic (str): e.g. ``Maximum``.

    Returns:
        list: The requested statistic of every datapoint.

    Raises:
        ProviderQueryError: If GetMetricStatistics fails.
    """
    try:
        response = cloudwatch.get_metric_statistics(
            Namespace="AWS/ApplicationELB",
            MetricName=metric_name,
            StartTime=start_time,
            EndTime=end_time,
            Period=PERIOD,
            Statistics=[statistic],
            Dimensions=[{"Name": "LoadBalancer", "Value": dimension}],
        )
        return jmespath.search(f"Datapoints[].{statistic}", response) or []
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to get {metric_name} statistics for {dimension}: {e}")
        raise ProviderQueryError(f"Failed to get {metric_name} statistics for {dimension}",
                                 "GetMetricStatistics", e) from e


def fetch_load_balancer_statistics(cloudwatch, load_balancers: list[LoadBalancer],
                                   now: datetime | None = None) -> list[LoadBalancerWithStatistics]:
    """
    Pairs each load balancer with its trailing 24 hour response time maxima and request sums.

    Two load balancers are queried at a time. Any failed query fails the whole fetch.

    Args:
        cloudwatch (boto3.client): CloudWatch client instance.
        load_balancers (list): Load balancers to fetch statistics for.
        now (datetime): End of the window. Defaults to the current UTC time.

    Returns:
        list: One LoadBalancerWithStatistics per load balancer, in input order.
    """
    end_time = now or datetime.now(timezone.utc)
    start_time = end_time - WINDOW

    def fetch(load_balancer: LoadBalancer) -> LoadBalancerWithStatistics:
        dimension = load_balancer.dimension
        response_times = get_datapoints(cloudwatch, dimension, "TargetResponseTime", "Maximum", start_time, end_time)
        request_counts = get_datapoints(cloudwatch, dimension, "RequestCount", "Sum", start_time, end_time)
        logger.info(f"Retrieved {len(response_times)} response time and {len(request_counts)} "
                    f"request count samples for {dimension}")
        return LoadBalancerWithStatistics(
            load_balancer=load_balancer,
            target_response_times=response_times,
            request_counts=request_counts,
        )

    return map_bounded(fetch, load_balancers)
