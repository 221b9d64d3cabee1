"""
Tests for the command line entry point and exit statuses.
"""

import json

import pytest

from cloudwatch_auto.alarm_model import AlarmSetCollection, SavedAlarm
from cloudwatch_auto.app import main
from cloudwatch_auto.configlib import ADD_ALARMS_FROM_FILE, GENERATE_ALARMS, HELP, LIST_SNS_TOPICS, RunConfig, parse_args
from cloudwatch_auto.errorlib import ConfigError
from cloudwatch_auto.resource_model import Ec2Instance, Family
from cloudwatch_auto.templatelib import ec2_alarms
from tests.conftest import TOPIC_ARN, client_error, set_pages


class TestParseArgs:
    """Test resolution of the run configuration."""

    def test_no_arguments_is_help(self):
        assert parse_args([]).action == HELP

    def test_defaults(self):
        config = parse_args(["--action=generateAlarms", f"--notificationArn={TOPIC_ARN}"])

        assert config == RunConfig(action=GENERATE_ALARMS, region="us-east-1", notification_arn=TOPIC_ARN,
                                   output_path="alarms.json")

    def test_all_options(self):
        config = parse_args(["--action", "generateAlarms", "--notificationArn", TOPIC_ARN, "--region", "eu-west-1",
                             "--output", "out.json", "--addImmediately"])

        assert config.region == "eu-west-1"
        assert config.output_path == "out.json"
        assert config.add_immediately is True

    def test_unknown_argument(self):
        with pytest.raises(ConfigError):
            parse_args(["--action=help", "--bogus"])

    def test_validate(self):
        with pytest.raises(ConfigError, match="notificationArn"):
            RunConfig(action=GENERATE_ALARMS).validate()
        with pytest.raises(ConfigError, match="input"):
            RunConfig(action=ADD_ALARMS_FROM_FILE).validate()
        with pytest.raises(ConfigError, match="Unrecognized action"):
            RunConfig(action="deleteEverything").validate()
        assert RunConfig(action=LIST_SNS_TOPICS).validate().action == LIST_SNS_TOPICS


class TestMain:
    """Test actions end to end through main()."""

    def test_help(self, clients, capsys):
        assert main([], clients) == 0
        assert "Usage cloudwatch-auto" in capsys.readouterr().out

    def test_missing_notification_arn_makes_no_provider_call(self, clients):
        assert main(["--action=generateAlarms"], clients) == 1
        clients.sts.get_caller_identity.assert_not_called()

    def test_unrecognized_action(self, clients):
        assert main(["--action=frobnicate"], clients) == 1

    def test_generate_deferred(self, clients, tmp_path):
        output = tmp_path / "alarms.json"
        set_pages(clients.ec2, {"Reservations": [{"Instances": [{"InstanceId": "i-001"}]}]})

        status = main(["--action=generateAlarms", f"--notificationArn={TOPIC_ARN}", f"--output={output}"], clients)

        assert status == 0
        data = json.loads(output.read_text())
        assert [saved["taggableIdOrArn"] for saved in data["EC2"]] == ["i-001"]
        clients.cloudwatch.put_metric_alarm.assert_not_called()
        clients.ec2.create_tags.assert_not_called()

    def test_generate_immediately(self, clients, tmp_path):
        output = tmp_path / "alarms.json"
        set_pages(clients.ec2, {"Reservations": [{"Instances": [{"InstanceId": "i-001"}]}]})

        status = main(["--action=generateAlarms", f"--notificationArn={TOPIC_ARN}", f"--output={output}",
                       "--addImmediately"], clients)

        assert status == 0
        assert not output.exists()
        assert clients.cloudwatch.put_metric_alarm.call_count == 3
        assert clients.ec2.create_tags.call_args.kwargs["Resources"] == ["i-001"]

    def test_generate_provider_failure(self, clients, tmp_path):
        output = tmp_path / "alarms.json"
        clients.rds.get_paginator.return_value.paginate.side_effect = client_error("DescribeDBInstances")

        status = main(["--action=generateAlarms", f"--notificationArn={TOPIC_ARN}", f"--output={output}"], clients)

        assert status == 1
        assert not output.exists()

    def test_add_from_file(self, clients, tmp_path):
        path = tmp_path / "alarms.json"
        AlarmSetCollection(saved_alarms={
            Family.EC2: [SavedAlarm("i-001", ec2_alarms(Ec2Instance("i-001"), TOPIC_ARN))],
        }).write(str(path))

        assert main(["--action=addAlarmsFromFile", f"--input={path}"], clients) == 0
        assert clients.cloudwatch.put_metric_alarm.call_count == 3
        clients.ec2.create_tags.assert_called_once()

    def test_add_from_malformed_file(self, clients, tmp_path):
        path = tmp_path / "alarms.json"
        path.write_text("{oops")

        assert main(["--action=addAlarmsFromFile", f"--input={path}"], clients) == 1
        clients.cloudwatch.put_metric_alarm.assert_not_called()

    def test_add_failure_exits_non_zero(self, clients, tmp_path):
        path = tmp_path / "alarms.json"
        AlarmSetCollection(saved_alarms={
            Family.EC2: [SavedAlarm("i-001", ec2_alarms(Ec2Instance("i-001"), TOPIC_ARN))],
        }).write(str(path))
        clients.cloudwatch.put_metric_alarm.side_effect = client_error("PutMetricAlarm")

        assert main(["--action=addAlarmsFromFile", f"--input={path}"], clients) == 1

    def test_list_sns_topics(self, clients):
        set_pages(clients.sns, {"Topics": [{"TopicArn": TOPIC_ARN}, {}]})

        assert main(["--action=listSnsTopics"], clients) == 0
        clients.sns.get_paginator.assert_called_once_with("list_topics")

    def test_list_sns_topics_failure(self, clients):
        clients.sns.get_paginator.return_value.paginate.side_effect = client_error("ListTopics")

        assert main(["--action=listSnsTopics"], clients) == 1
