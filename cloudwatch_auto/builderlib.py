from typing import assert_never
from cloudwatch_auto.alarm_model import AlarmSetCollection, SavedAlarm
from cloudwatch_auto.clientlib import ProviderClients, get_account_id
from cloudwatch_auto.configlib import RunConfig
from cloudwatch_auto.loglib import logger
from cloudwatch_auto.resource_model import FAMILY_ORDER, Family
from cloudwatch_auto.resourcelib import (
    list_ec2_instances,
    list_load_balancers,
    list_rds_instances,
    list_redshift_clusters,
)
from cloudwatch_auto.statslib import fetch_load_balancer_statistics
from cloudwatch_auto.templatelib import ec2_alarms, elb_alarms, rds_alarms, redshift_alarms


class AlarmSetBuilder:
    """
    Discovers uncovered resources family by family and derives their baseline alarms.

    Args:
        clients (ProviderClients): Provider clients for this run.
        config (RunConfig): The run configuration (region and notification ARN are used).
        account_id (str): The caller's account, needed to build Redshift cluster ARNs.
    """
    def __init__(self, clients: ProviderClients, config: RunConfig, account_id: str):
        self.clients = clients
        self.config = config
        self.account_id = account_id

    def build(self) -> AlarmSetCollection:
        """
        Builds every family's saved alarms in ``FAMILY_ORDER``.

        A failure in any family propagates and no collection is returned.
        """
        saved_alarms = {family: self.build_family(family) for family in FAMILY_ORDER}
        collection = AlarmSetCollection(saved_alarms=saved_alarms)
        logger.info(f"Generated {collection.alarm_count()} alarms for {collection.resource_count()} resources")
        return collection

    def build_family(self, family: Family) -> list[SavedAlarm]:
        notification_arn = self.config.notification_arn
        if family is Family.EC2:
            return [
                SavedAlarm(instance.instance_id, ec2_alarms(instance, notification_arn))
                for instance in list_ec2_instances(self.clients.ec2)
            ]
        elif family is Family.RDS:
            return [
                SavedAlarm(instance.arn, rds_alarms(instance, notification_arn))
                for instance in list_rds_instances(self.clients.rds)
            ]
        elif family is Family.ELB:
            load_balancers = list_load_balancers(self.clients.elbv2)
            return [
                SavedAlarm(stats.load_balancer.arn, elb_alarms(stats, notification_arn))
                for stats in fetch_load_balancer_statistics(self.clients.cloudwatch, load_balancers)
            ]
        elif family is Family.REDSHIFT:
            return [
                SavedAlarm(cluster.arn(self.config.region, self.account_id), redshift_alarms(cluster, notification_arn))
                for cluster in list_redshift_clusters(self.clients.redshift)
            ]
        else:
            assert_never(family)


def generate_alarms(clients: ProviderClients, config: RunConfig) -> AlarmSetCollection:
    """
    Generates the alarm set for the account and, unless applying immediately, writes it to disk.

    Args:
        clients (ProviderClients): Provider clients for this run.
        config (RunConfig): The validated run configuration.

    Returns:
        AlarmSetCollection: The complete collection.

    Raises:
        ProviderQueryError: If any listing, tag or statistics call fails. Nothing is written.
        ProgrammingInvariantViolation: If a resource lacks its identifying field. Nothing is written.
    """
    account_id = get_account_id(clients.sts)
    collection = AlarmSetBuilder(clients, config, account_id).build()

    if not config.add_immediately:
        collection.write(config.output_path)
        logger.info(f"Writing proposed alarms to {config.output_path}. "
                    f"Run with '--action=addAlarmsFromFile --input={config.output_path}' to add them.")

    return collection
