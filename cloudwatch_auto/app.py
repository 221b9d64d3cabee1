"""Command line entry point: the one place that decides the process exit status."""
import sys
from cloudwatch_auto.alarm_model import AlarmSetCollection
from cloudwatch_auto.applylib import AlarmApplier
from cloudwatch_auto.builderlib import generate_alarms
from cloudwatch_auto.clientlib import ProviderClients, list_topic_arns, start_clients
from cloudwatch_auto.configlib import (
    ADD_ALARMS_FROM_FILE,
    GENERATE_ALARMS,
    HELP,
    HELP_TEXT,
    LIST_SNS_TOPICS,
    RunConfig,
    parse_args,
)
from cloudwatch_auto.errorlib import AutoWatchError, ConfigError
from cloudwatch_auto.loglib import logger


def run(config: RunConfig, clients: ProviderClients | None = None) -> None:
    """
    Executes the configured action.

    Args:
        config (RunConfig): A validated run configuration.
        clients (ProviderClients): Provider clients. Built for ``config.region`` if omitted.

    Raises:
        AutoWatchError: On any fatal condition.
    """
    if config.action == HELP:
        print(HELP_TEXT)
        return

    clients = clients or start_clients(config.region)

    if config.action == GENERATE_ALARMS:
        collection = generate_alarms(clients, config)
        if config.add_immediately:
            logger.info("Applying immediately as requested.")
            AlarmApplier(clients).apply(collection)
    elif config.action == ADD_ALARMS_FROM_FILE:
        collection = AlarmSetCollection.read(config.input_path)
        AlarmApplier(clients).apply(collection)
    elif config.action == LIST_SNS_TOPICS:
        logger.info("Available SNS Topics:")
        for arn in list_topic_arns(clients.sns):
            logger.info(arn)
    else:
        raise ConfigError(f"Unrecognized action: {config.action}")


def main(argv: list[str] | None = None, clients: ProviderClients | None = None) -> int:
    """
    Parses arguments, runs the action and maps the outcome to an exit status.

    Returns:
        int: 0 on success, help or topic listing; 1 on any fatal error.
    """
    argv = sys.argv[1:] if argv is None else argv
    try:
        config = parse_args(argv).validate()
        run(config, clients)
        return 0
    except AutoWatchError as e:
        cause = getattr(e, "cause", None)
        logger.error(f"{type(e).__name__}: {e}", extra={"cause": repr(cause) if cause else None})
        return 1
    except OSError as e:
        logger.error(f"Could not write alarm file: {e}")
        return 1
