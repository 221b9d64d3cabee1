"""Baseline alarm templates, one function per resource family.

These are pure: the same resource, statistics and notification ARN always give
the same alarm list. Thresholds are fixed policy.
"""
from cloudwatch_auto.alarm_model import AlarmDefinition
from cloudwatch_auto.errorlib import ProgrammingInvariantViolation
from cloudwatch_auto.resource_model import DbInstance, Ec2Instance, LoadBalancerWithStatistics, RedshiftCluster
from cloudwatch_auto.taglib import marker_tag

PERIOD = 60
ONE_GIB = 1073741824


def build_alarm_name(purpose: str, identifier: str) -> str:
    """
    Constructs the name for a CloudWatch alarm.

    The name is unique per purpose and resource, so generating again for the same
    resource overwrites the existing alarm instead of adding a second one.
    """
    return f"{marker_tag}: {purpose} ({identifier})"


def _alarm(purpose: str, identifier: str, dimension_name: str, notification_arn: str, *,
           comparison_operator: str, metric_name: str, namespace: str, evaluation_periods: int,
           threshold: float, statistic: str) -> AlarmDefinition:
    if not identifier:
        raise ProgrammingInvariantViolation(f"Missing {dimension_name} for alarm '{purpose}'.")
    return AlarmDefinition(
        actions_enabled=True,
        alarm_name=build_alarm_name(purpose, identifier),
        comparison_operator=comparison_operator,
        metric_name=metric_name,
        namespace=namespace,
        period=PERIOD,
        evaluation_periods=evaluation_periods,
        threshold=threshold,
        statistic=statistic,
        dimensions=[{"Name": dimension_name, "Value": identifier}],
        alarm_actions=[notification_arn],
    )


def ec2_alarms(instance: Ec2Instance, notification_arn: str) -> list[AlarmDefinition]:
    """
    StatusCheckFailed > 0
    CPUUtilization > 95% for 5 minutes
    NetworkPacketsOut < 100 for 5 minutes
    """
    instance_id = instance.instance_id
    return [
        _alarm("Status check failed", instance_id, "InstanceId", notification_arn,
               comparison_operator="GreaterThanThreshold", metric_name="StatusCheckFailed",
               namespace="AWS/EC2", evaluation_periods=1, threshold=0, statistic="Maximum"),
        _alarm("CPU utilization over 95%", instance_id, "InstanceId", notification_arn,
               comparison_operator="GreaterThanThreshold", metric_name="CPUUtilization",
               namespace="AWS/EC2", evaluation_periods=5, threshold=95, statistic="Average"),
        _alarm("Network I/O low", instance_id, "InstanceId", notification_arn,
               comparison_operator="LessThanThreshold", metric_name="NetworkPacketsOut",
               namespace="AWS/EC2", evaluation_periods=5, threshold=100, statistic="Average"),
    ]


def rds_alarms(instance: DbInstance, notification_arn: str) -> list[AlarmDefinition]:
    """
    CPUUtilization > 95% for 5 minutes
    FreeStorageSpace < 1GB for 5 minutes
    DiskQueueDepth > 100 for 5 minutes
    """
    identifier = instance.identifier
    return [
        _alarm("CPU utilization over 95%", identifier, "DBInstanceIdentifier", notification_arn,
               comparison_operator="GreaterThanThreshold", metric_name="CPUUtilization",
               namespace="AWS/RDS", evaluation_periods=5, threshold=95, statistic="Average"),
        _alarm("Storage space less than 1GB", identifier, "DBInstanceIdentifier", notification_arn,
               comparison_operator="LessThanThreshold", metric_name="FreeStorageSpace",
               namespace="AWS/RDS", evaluation_periods=5, threshold=ONE_GIB, statistic="Average"),
        _alarm("Query depth over 100", identifier, "DBInstanceIdentifier", notification_arn,
               comparison_operator="GreaterThanThreshold", metric_name="DiskQueueDepth",
               namespace="AWS/RDS", evaluation_periods=5, threshold=100, statistic="Average"),
    ]


def elb_alarms(stats: LoadBalancerWithStatistics, notification_arn: str) -> list[AlarmDefinition]:
    """
    HTTPCode_Target_5XX_Count > 0 for 5 minutes
    TargetResponseTime > 2x the 24 hour maximum for 5 minutes, if there were samples
    Request sum > 2x the 24 hour maximum for 5 minutes, if there were samples
    """
    dimension = stats.load_balancer.dimension
    alarms = [
        _alarm("500s over 0 for 5 minutes", dimension, "LoadBalancer", notification_arn,
               comparison_operator="GreaterThanThreshold", metric_name="HTTPCode_Target_5XX_Count",
               namespace="AWS/ApplicationELB", evaluation_periods=5, threshold=0, statistic="Average"),
    ]

    max_response = max(stats.target_response_times, default=None)
    if max_response:
        alarms.append(
            _alarm("Response time over 200% of 24hr max for 5 minutes", dimension, "LoadBalancer", notification_arn,
                   comparison_operator="GreaterThanThreshold", metric_name="TargetResponseTime",
                   namespace="AWS/ApplicationELB", evaluation_periods=5, threshold=max_response * 2,
                   statistic="Average")
        )

    max_requests = max(stats.request_counts, default=None)
    if max_requests:
        # TODO: confirm whether this alarm should watch RequestCount rather than TargetResponseTime
        alarms.append(
            _alarm("Requests over 200% of 24hr max for 5 minutes", dimension, "LoadBalancer", notification_arn,
                   comparison_operator="GreaterThanThreshold", metric_name="TargetResponseTime",
                   namespace="AWS/ApplicationELB", evaluation_periods=5, threshold=max_requests * 2,
                   statistic="Sum")
        )

    return alarms


def redshift_alarms(cluster: RedshiftCluster, notification_arn: str) -> list[AlarmDefinition]:
    """
    CPUUtilization > 95% for 5 minutes
    HealthStatus = 0 for 5 minutes
    PercentageDiskSpaceUsed > 95% for 5 minutes
    """
    identifier = cluster.identifier
    return [
        _alarm("CPU utilization over 95%", identifier, "ClusterIdentifier", notification_arn,
               comparison_operator="GreaterThanThreshold", metric_name="CPUUtilization",
               namespace="AWS/Redshift", evaluation_periods=5, threshold=95, statistic="Average"),
        _alarm("Health status is 0", identifier, "ClusterIdentifier", notification_arn,
               comparison_operator="LessThanOrEqualToThreshold", metric_name="HealthStatus",
               namespace="AWS/Redshift", evaluation_periods=5, threshold=0, statistic="Average"),
        _alarm("Disk space over 95%", identifier, "ClusterIdentifier", notification_arn,
               comparison_operator="GreaterThanThreshold", metric_name="PercentageDiskSpaceUsed",
               namespace="AWS/Redshift", evaluation_periods=5, threshold=95, statistic="Average"),
    ]
