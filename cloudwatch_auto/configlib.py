import argparse
from dataclasses import dataclass
from os import environ
from cloudwatch_auto.errorlib import ConfigError

# Retrieve environment variables with defaults
default_region: str = environ.get('region', 'us-east-1')
default_output: str = 'alarms.json'

GENERATE_ALARMS = "generateAlarms"
ADD_ALARMS_FROM_FILE = "addAlarmsFromFile"
LIST_SNS_TOPICS = "listSnsTopics"
HELP = "help"

ACTIONS = (GENERATE_ALARMS, ADD_ALARMS_FROM_FILE, LIST_SNS_TOPICS, HELP)

HELP_TEXT = """
Usage cloudwatch-auto [options]

cloudwatch-auto automatically adds baseline alarms to your AWS resources.
These alarms are intended to serve only as a starting point, mostly useful when you're just starting out with AWS.

Note: The AWS client authenticates automatically using IAM roles, environment variables, or a credentials file.
      One of these must be available in order for cloudwatch-auto to work.

Action Flags:
Pass any one of these as an argument to --action. Ex. --action=generateAlarms

    generateAlarms:             Generates a file based on AWS resources. The file is alarms.json by default.
    addAlarmsFromFile:          Add alarms from a JSON file specified by --input (see below)
    listSnsTopics:              Lists the available SNS topics
    help:                       Prints this message

Options:
    --notificationArn           The SNS topic ARN to use for notifications. Use with 'generateAlarms'
    --output                    The JSON file to output alarms to. Use with 'generateAlarms'
    --addImmediately            Set if you want to just add alarms immediately. Use with 'generateAlarms'
    --input                     The JSON file to add alarms from. Use with 'addAlarmsFromFile'
    --region                    The AWS region to access. Defaults to us-east-1

Examples:
    # This will create a file named alarms.json
    cloudwatch-auto --action=generateAlarms --notificationArn=arn:aws:sns:us-east-1:123:ContactAndCloudWatch

    # Now, create the alarms contained inside alarms.json. You can edit the alarms before adding them.
    cloudwatch-auto --action=addAlarmsFromFile --input=alarms.json
"""


@dataclass(frozen=True)
class RunConfig:
    """
    Options resolved once at startup and shared read-only by every component.

    Attributes:
        action (str): One of ``ACTIONS``.
        region (str): AWS region used for every provider client.
        notification_arn (str): SNS topic embedded as the action of each generated alarm.
        output_path (str): Where ``generateAlarms`` writes the alarm file.
        input_path (str): The alarm file read by ``addAlarmsFromFile``.
        add_immediately (bool): Apply generated alarms in the same run instead of writing a file.
    """
    action: str = HELP
    region: str = default_region
    notification_arn: str = ""
    output_path: str = default_output
    input_path: str = ""
    add_immediately: bool = False

    def validate(self) -> "RunConfig":
        """
        Checks that the options required by the chosen action are present.

        Returns:
            RunConfig: The same configuration, for chaining.

        Raises:
            ConfigError: If the action is unknown or a mandatory option is missing.
        """
        if self.action not in ACTIONS:
            raise ConfigError(f"Unrecognized action: {self.action}")
        if self.action == GENERATE_ALARMS and not self.notification_arn:
            raise ConfigError("You must specify a notificationArn option for where to receive alerts.")
        if self.action == ADD_ALARMS_FROM_FILE and not self.input_path:
            raise ConfigError("You must specify an input JSON file to add alerts.")
        return self


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cloudwatch-auto", add_help=False, exit_on_error=False)
    parser.add_argument("--action", default="")
    parser.add_argument("--notificationArn", dest="notification_arn", default="")
    parser.add_argument("--region", default=default_region)
    parser.add_argument("--output", dest="output_path", default=default_output)
    parser.add_argument("--input", dest="input_path", default="")
    parser.add_argument("--addImmediately", dest="add_immediately", action="store_true")
    parser.add_argument("--help", dest="help", action="store_true")
    return parser


def parse_args(argv: list[str]) -> RunConfig:
    """
    Resolves the run configuration from command line arguments.

    No arguments at all, ``--help`` or an empty ``--action`` select the help action.

    Args:
        argv (list): Arguments without the program name.

    Returns:
        RunConfig: The resolved (not yet validated) configuration.

    Raises:
        ConfigError: If the arguments cannot be parsed.
    """
    if not argv:
        return RunConfig(action=HELP)

    parser = build_parser()
    try:
        args, unknown = parser.parse_known_args(argv)
    except argparse.ArgumentError as e:
        raise ConfigError(f"Could not parse arguments: {e}") from e
    if unknown:
        raise ConfigError(f"Unrecognized arguments: {' '.join(unknown)}")

    action = HELP if args.help or not args.action else args.action
    return RunConfig(
        action=action,
        region=args.region or default_region,
        notification_arn=args.notification_arn,
        output_path=args.output_path or default_output,
        input_path=args.input_path,
        add_immediately=args.add_immediately,
    )
