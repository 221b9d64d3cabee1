import threading
import time
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cloudwatch_auto.clientlib import ProviderClients
from cloudwatch_auto.configlib import GENERATE_ALARMS, RunConfig

TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:Alerts"
ACCOUNT_ID = "123456789012"
LB_ARN = "arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/my-lb/50dc6c495c0c9188"
DB_ARN = "arn:aws:rds:us-east-1:123456789012:db:orders"


def client_error(operation: str, code: str = "Throttling") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Rate exceeded"}}, operation)


def set_pages(client: MagicMock, *pages: dict) -> None:
    """Makes ``client.get_paginator(...).paginate()`` yield the given pages."""
    client.get_paginator.return_value.paginate.return_value = list(pages)


def marker(value: str = "2024-01-01T00:00:00+00:00") -> dict:
    return {"Key": "SetfiveCloudAutoWatch", "Value": value}


class InFlightRecorder:
    """
    Callable stand-in for a slow provider call that records how many calls overlap.

    Usable directly or as a mock ``side_effect``; ``func`` produces the return value.
    """
    def __init__(self, func=None, delay: float = 0.05):
        self.func = func or (lambda *args, **kwargs: None)
        self.delay = delay
        self.lock = threading.Lock()
        self.active = 0
        self.peak = 0
        self.calls = 0

    def __call__(self, *args, **kwargs):
        with self.lock:
            self.calls += 1
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            time.sleep(self.delay)
            return self.func(*args, **kwargs)
        finally:
            with self.lock:
                self.active -= 1


@pytest.fixture
def clients() -> ProviderClients:
    provider = ProviderClients(
        ec2=MagicMock(),
        rds=MagicMock(),
        elbv2=MagicMock(),
        redshift=MagicMock(),
        cloudwatch=MagicMock(),
        sns=MagicMock(),
        sts=MagicMock(),
    )
    for client in (provider.ec2, provider.rds, provider.elbv2, provider.redshift):
        set_pages(client)
    provider.sts.get_caller_identity.return_value = {"Account": ACCOUNT_ID}
    provider.cloudwatch.get_metric_statistics.return_value = {"Datapoints": []}
    return provider


@pytest.fixture
def config(tmp_path) -> RunConfig:
    return RunConfig(
        action=GENERATE_ALARMS,
        region="us-east-1",
        notification_arn=TOPIC_ARN,
        output_path=str(tmp_path / "alarms.json"),
    )
