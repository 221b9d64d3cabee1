"""
Tests for the baseline alarm templates.
"""

import pytest

from cloudwatch_auto.errorlib import ProgrammingInvariantViolation
from cloudwatch_auto.resource_model import (
    DbInstance,
    Ec2Instance,
    LoadBalancer,
    LoadBalancerWithStatistics,
    RedshiftCluster,
)
from cloudwatch_auto.templatelib import (
    ONE_GIB,
    build_alarm_name,
    ec2_alarms,
    elb_alarms,
    rds_alarms,
    redshift_alarms,
)
from tests.conftest import DB_ARN, LB_ARN, TOPIC_ARN


def lb_stats(response_times=(), request_counts=()) -> LoadBalancerWithStatistics:
    return LoadBalancerWithStatistics(
        load_balancer=LoadBalancer(arn=LB_ARN),
        target_response_times=list(response_times),
        request_counts=list(request_counts),
    )


class TestEc2Alarms:
    """Test EC2 instance alarms."""

    def test_three_alarms(self):
        alarms = ec2_alarms(Ec2Instance("i-001"), TOPIC_ARN)

        assert [alarm.metric_name for alarm in alarms] == ["StatusCheckFailed", "CPUUtilization", "NetworkPacketsOut"]
        assert [alarm.evaluation_periods for alarm in alarms] == [1, 5, 5]
        assert [alarm.threshold for alarm in alarms] == [0, 95, 100]
        assert [alarm.comparison_operator for alarm in alarms] == [
            "GreaterThanThreshold", "GreaterThanThreshold", "LessThanThreshold",
        ]

    def test_common_fields(self):
        for alarm in ec2_alarms(Ec2Instance("i-001"), TOPIC_ARN):
            assert alarm.period == 60
            assert alarm.actions_enabled is True
            assert alarm.namespace == "AWS/EC2"
            assert alarm.alarm_actions == [TOPIC_ARN]
            assert alarm.dimensions == [{"Name": "InstanceId", "Value": "i-001"}]
            assert "i-001" in alarm.alarm_name

    def test_alarm_name(self):
        alarms = ec2_alarms(Ec2Instance("i-001"), TOPIC_ARN)

        assert alarms[1].alarm_name == "SetfiveCloudAutoWatch: CPU utilization over 95% (i-001)"
        assert build_alarm_name("Network I/O low", "i-001") == alarms[2].alarm_name

    def test_pure(self):
        instance = Ec2Instance("i-001")

        assert ec2_alarms(instance, TOPIC_ARN) == ec2_alarms(instance, TOPIC_ARN)

    def test_missing_instance_id(self):
        with pytest.raises(ProgrammingInvariantViolation):
            ec2_alarms(Ec2Instance(""), TOPIC_ARN)


class TestRdsAlarms:
    """Test RDS instance alarms."""

    def test_three_alarms(self):
        alarms = rds_alarms(DbInstance("orders", DB_ARN), TOPIC_ARN)

        assert [alarm.metric_name for alarm in alarms] == ["CPUUtilization", "FreeStorageSpace", "DiskQueueDepth"]
        assert alarms[1].threshold == ONE_GIB == 1024 ** 3
        assert alarms[1].comparison_operator == "LessThanThreshold"
        assert all(alarm.dimensions == [{"Name": "DBInstanceIdentifier", "Value": "orders"}] for alarm in alarms)
        assert all(alarm.namespace == "AWS/RDS" for alarm in alarms)


class TestRedshiftAlarms:
    """Test Redshift cluster alarms."""

    def test_three_alarms(self):
        alarms = redshift_alarms(RedshiftCluster("warehouse"), TOPIC_ARN)

        assert [alarm.metric_name for alarm in alarms] == ["CPUUtilization", "HealthStatus", "PercentageDiskSpaceUsed"]
        assert alarms[1].comparison_operator == "LessThanOrEqualToThreshold"
        assert alarms[1].threshold == 0
        assert all(alarm.dimensions == [{"Name": "ClusterIdentifier", "Value": "warehouse"}] for alarm in alarms)


class TestElbAlarms:
    """Test load balancer alarms and threshold derivation."""

    def test_dimension_from_arn(self):
        assert LoadBalancer(arn=LB_ARN).dimension == "app/my-lb/50dc6c495c0c9188"

    def test_only_5xx_without_samples(self):
        alarms = elb_alarms(lb_stats(), TOPIC_ARN)

        assert len(alarms) == 1
        assert alarms[0].metric_name == "HTTPCode_Target_5XX_Count"
        assert alarms[0].dimensions == [{"Name": "LoadBalancer", "Value": "app/my-lb/50dc6c495c0c9188"}]

    def test_zero_maximum_counts_as_no_sample(self):
        alarms = elb_alarms(lb_stats([0.0], [0.0]), TOPIC_ARN)

        assert len(alarms) == 1
        assert alarms[0].metric_name == "HTTPCode_Target_5XX_Count"

    def test_response_time_threshold_is_double_the_max(self):
        alarms = elb_alarms(lb_stats(response_times=[0.12, 0.5, 0.25]), TOPIC_ARN)

        assert len(alarms) == 2
        assert alarms[1].metric_name == "TargetResponseTime"
        assert alarms[1].statistic == "Average"
        assert alarms[1].threshold == 1.0

    def test_request_alarm_reuses_target_response_time(self):
        alarms = elb_alarms(lb_stats(request_counts=[10.0, 40.0]), TOPIC_ARN)

        assert len(alarms) == 2
        assert alarms[1].metric_name == "TargetResponseTime"
        assert alarms[1].statistic == "Sum"
        assert alarms[1].threshold == 80.0

    def test_all_three(self):
        alarms = elb_alarms(lb_stats([0.3], [12.0]), TOPIC_ARN)

        assert len(alarms) == 3
        assert all(alarm.namespace == "AWS/ApplicationELB" for alarm in alarms)
        assert len({alarm.alarm_name for alarm in alarms}) == 3

    def test_pure(self):
        stats = lb_stats([0.3], [12.0])

        assert elb_alarms(stats, TOPIC_ARN) == elb_alarms(stats, TOPIC_ARN)
