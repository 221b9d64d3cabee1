from typing import Any, Callable, assert_never
from botocore.exceptions import BotoCoreError, ClientError
from cloudwatch_auto.alarm_model import AlarmSetCollection, SavedAlarm
from cloudwatch_auto.alarmlib import create_alarms
from cloudwatch_auto.clientlib import ProviderClients
from cloudwatch_auto.errorlib import ApplyFailure, ProviderQueryError
from cloudwatch_auto.loglib import logger
from cloudwatch_auto.resource_model import FAMILY_ORDER, Family
from cloudwatch_auto.taglib import build_marker_tags


def write_tags(operation: str, call: Callable[..., Any], **kwargs) -> None:
    """
    Issues one tag-write call.

    Raises:
        ProviderQueryError: If the call fails.
    """
    try:
        call(**kwargs)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to call {operation}: {e}")
        raise ProviderQueryError(f"Failed to call {operation}", operation, e) from e


class AlarmApplier:
    """
    Creates every alarm of a collection, then marks the owning resources as covered.

    Families are applied in ``FAMILY_ORDER``. Within a family all alarms are created
    before any resource is tagged, so a resource is never marked without its alarms.

    Args:
        clients (ProviderClients): Provider clients for this run.
    """
    def __init__(self, clients: ProviderClients):
        self.clients = clients

    def apply(self, collection: AlarmSetCollection) -> list[Family]:
        """
        Applies every family, stopping the whole run at the first failure.

        Returns:
            list: The families processed, in order (skipped empty families included).

        Raises:
            ApplyFailure: Naming the family that failed and those already applied.
        """
        applied: list[Family] = []
        for family in FAMILY_ORDER:
            try:
                self.apply_family(family, collection[family])
            except ProviderQueryError as e:
                raise ApplyFailure(family.value, [done.value for done in applied], e) from e
            applied.append(family)

        logger.info("Applied alarms and tags successfully.")
        return applied

    def apply_family(self, family: Family, saved_alarms: list[SavedAlarm]) -> bool:
        """
        Creates one family's alarms sequentially, then tags its resources.

        Returns:
            bool: False if the family had nothing to apply and was skipped.
        """
        taggable_ids = [saved.taggable_id_or_arn for saved in saved_alarms]
        alarms = [alarm for saved in saved_alarms for alarm in saved.alarms]

        if not taggable_ids or not alarms:
            logger.info(f"No {family.value} alarms found. Skipping")
            return False

        logger.info(f"Applying {family.value} alarms and tags on: {', '.join(taggable_ids)}")
        create_alarms(self.clients.cloudwatch, alarms)
        self.tag_family(family, taggable_ids)
        return True

    def tag_family(self, family: Family, taggable_ids: list[str]) -> None:
        tags = build_marker_tags()
        if family is Family.EC2:
            write_tags("CreateTags", self.clients.ec2.create_tags, Resources=taggable_ids, Tags=tags)
        elif family is Family.RDS:
            for arn in taggable_ids:
                write_tags("AddTagsToResource", self.clients.rds.add_tags_to_resource, ResourceName=arn, Tags=tags)
        elif family is Family.ELB:
            write_tags("AddTags", self.clients.elbv2.add_tags, ResourceArns=taggable_ids, Tags=tags)
        elif family is Family.REDSHIFT:
            for arn in taggable_ids:
                write_tags("CreateTags", self.clients.redshift.create_tags, ResourceName=arn, Tags=tags)
        else:
            assert_never(family)
        logger.info(f"Tagged {len(taggable_ids)} {family.value} resources")
