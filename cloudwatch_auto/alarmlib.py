from botocore.exceptions import BotoCoreError, ClientError
from cloudwatch_auto.alarm_model import AlarmDefinition
from cloudwatch_auto.errorlib import ProviderQueryError
from cloudwatch_auto.loglib import logger


def create_alarm(cloudwatch, alarm: AlarmDefinition) -> None:
    """
    Creates (or overwrites) a CloudWatch alarm.

    Args:
        cloudwatch (boto3.client): CloudWatch client instance.
        alarm (AlarmDefinition): The alarm to put.

    Raises:
        ProviderQueryError: If PutMetricAlarm fails.
    """
    try:
        cloudwatch.put_metric_alarm(**alarm.to_dict())
        logger.info(f"Created alarm: {alarm.alarm_name}")
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to create alarm {alarm.alarm_name}: {e}")
        raise ProviderQueryError(f"Failed to create alarm {alarm.alarm_name}", "PutMetricAlarm", e) from e


def create_alarms(cloudwatch, alarms: list[AlarmDefinition]) -> None:
    """
    Creates alarms one after the other, stopping at the first failure.

    Args:
        cloudwatch (boto3.client): CloudWatch client instance.
        alarms (list): Alarms to put, in order.

    Raises:
        ProviderQueryError: On the first failed PutMetricAlarm call.
    """
    for alarm in alarms:
        create_alarm(cloudwatch, alarm)
    logger.info(f"Created {len(alarms)} alarms")
