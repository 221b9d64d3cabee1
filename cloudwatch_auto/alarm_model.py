import json
import os
from dataclasses import dataclass, field
from cloudwatch_auto.errorlib import MalformedInputFile
from cloudwatch_auto.loglib import logger
from cloudwatch_auto.resource_model import FAMILY_ORDER, Family

# PutMetricAlarm parameter name for each AlarmDefinition attribute, in file order
ALARM_FIELDS: tuple[tuple[str, str], ...] = (
    ("actions_enabled", "ActionsEnabled"),
    ("alarm_name", "AlarmName"),
    ("comparison_operator", "ComparisonOperator"),
    ("metric_name", "MetricName"),
    ("namespace", "Namespace"),
    ("period", "Period"),
    ("evaluation_periods", "EvaluationPeriods"),
    ("threshold", "Threshold"),
    ("statistic", "Statistic"),
    ("dimensions", "Dimensions"),
    ("alarm_actions", "AlarmActions"),
)


@dataclass(frozen=True)
class AlarmDefinition:
    """
    Data class representing a CloudWatch metric alarm, in PutMetricAlarm terms.

    ``extra`` holds any further PutMetricAlarm parameters an operator added while
    reviewing the alarm file; they are written back out and sent with the alarm.
    """
    alarm_name: str
    comparison_operator: str
    metric_name: str
    namespace: str
    period: int
    evaluation_periods: int
    threshold: float
    statistic: str
    dimensions: list
    alarm_actions: list
    actions_enabled: bool = True
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Returns the alarm as PutMetricAlarm keyword arguments."""
        data = {key: getattr(self, attr) for attr, key in ALARM_FIELDS}
        data["Dimensions"] = [dict(dimension) for dimension in self.dimensions]
        data["AlarmActions"] = list(self.alarm_actions)
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AlarmDefinition":
        """
        Builds an alarm from its PutMetricAlarm representation.

        Raises:
            ValueError: If a required key is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Alarm must be an object, got {type(data).__name__}")
        missing = [key for _, key in ALARM_FIELDS if key not in data]
        if missing:
            raise ValueError(f"Alarm {data.get('AlarmName', '<unnamed>')} is missing {', '.join(missing)}")

        if not isinstance(data["ActionsEnabled"], bool):
            raise ValueError(f"ActionsEnabled must be a boolean in alarm {data['AlarmName']}")
        for key in ("Period", "EvaluationPeriods"):
            if isinstance(data[key], bool) or not isinstance(data[key], int):
                raise ValueError(f"{key} must be an integer in alarm {data['AlarmName']}")
        if isinstance(data["Threshold"], bool) or not isinstance(data["Threshold"], (int, float)):
            raise ValueError(f"Threshold must be a number in alarm {data['AlarmName']}")
        if not isinstance(data["Dimensions"], list):
            raise ValueError(f"Dimensions must be a list in alarm {data['AlarmName']}")
        for dimension in data["Dimensions"]:
            if not isinstance(dimension, dict) or "Name" not in dimension or "Value" not in dimension:
                raise ValueError(f"Malformed dimension {dimension} in alarm {data['AlarmName']}")
        if not isinstance(data["AlarmActions"], list):
            raise ValueError(f"AlarmActions must be a list in alarm {data['AlarmName']}")

        known = {key for _, key in ALARM_FIELDS}
        return cls(
            **{attr: data[key] for attr, key in ALARM_FIELDS},
            extra={key: value for key, value in data.items() if key not in known},
        )


@dataclass(frozen=True)
class SavedAlarm:
    """One resource's taggable id or ARN paired with the alarms generated for it."""
    taggable_id_or_arn: str
    alarms: list

    def to_dict(self) -> dict:
        return {
            "taggableIdOrArn": self.taggable_id_or_arn,
            "alarms": [alarm.to_dict() for alarm in self.alarms],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SavedAlarm":
        if not isinstance(data, dict):
            raise ValueError(f"Saved alarm must be an object, got {type(data).__name__}")
        taggable = data.get("taggableIdOrArn")
        if not isinstance(taggable, str) or not taggable:
            raise ValueError("Saved alarm is missing taggableIdOrArn")
        alarms = data.get("alarms")
        if not isinstance(alarms, list):
            raise ValueError(f"Saved alarm {taggable} is missing its alarms list")
        return cls(taggable_id_or_arn=taggable, alarms=[AlarmDefinition.from_dict(alarm) for alarm in alarms])


@dataclass(frozen=True)
class AlarmSetCollection:
    """
    Every family's saved alarms for one run, keyed by family.

    Every family in ``FAMILY_ORDER`` is always present, possibly with an empty list.
    This is the unit written by ``generateAlarms`` and read by ``addAlarmsFromFile``.
    """
    saved_alarms: dict = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "saved_alarms", {
            family: list(self.saved_alarms.get(family, [])) for family in FAMILY_ORDER
        })

    def __getitem__(self, family: Family) -> list:
        return self.saved_alarms[family]

    def to_dict(self) -> dict:
        return {
            family.value: [saved.to_dict() for saved in self.saved_alarms[family]]
            for family in FAMILY_ORDER
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AlarmSetCollection":
        """
        Builds a collection from its file representation.

        Raises:
            ValueError: If a family key is missing or unknown, or an entry is malformed.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object at the top level, got {type(data).__name__}")
        expected = [family.value for family in FAMILY_ORDER]
        unknown = [key for key in data if key not in expected]
        if unknown:
            raise ValueError(f"Unknown service keys: {', '.join(unknown)}")
        saved_alarms = {}
        for family in FAMILY_ORDER:
            if family.value not in data:
                raise ValueError(f"Missing service key: {family.value}")
            entries = data[family.value]
            if not isinstance(entries, list):
                raise ValueError(f"{family.value} must be a list")
            saved_alarms[family] = [SavedAlarm.from_dict(entry) for entry in entries]
        return cls(saved_alarms=saved_alarms)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str, path: str = "<string>") -> "AlarmSetCollection":
        """
        Parses the alarm file format.

        Raises:
            MalformedInputFile: If the text is not valid JSON or not a valid collection.
        """
        try:
            return cls.from_dict(json.loads(text))
        except json.JSONDecodeError as e:
            raise MalformedInputFile(path, f"invalid JSON: {e}", e) from e
        except ValueError as e:
            raise MalformedInputFile(path, str(e), e) from e

    def write(self, path: str) -> None:
        """Writes the collection as formatted JSON, replacing ``path`` in one step."""
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as handle:
                handle.write(self.to_json())
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write alarms to {path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.info(f"Wrote {self.alarm_count()} alarms for {self.resource_count()} resources to {path}")

    @classmethod
    def read(cls, path: str) -> "AlarmSetCollection":
        """
        Reads a collection previously written by :meth:`write` (possibly hand edited).

        Raises:
            MalformedInputFile: If the file cannot be read or parsed.
        """
        try:
            with open(path, encoding="utf-8") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedInputFile(path, str(e), e) from e
        collection = cls.from_json(text, path)
        logger.info(f"Read {collection.alarm_count()} alarms for {collection.resource_count()} resources from {path}")
        return collection

    def resource_count(self) -> int:
        return sum(len(self.saved_alarms[family]) for family in FAMILY_ORDER)

    def alarm_count(self) -> int:
        return sum(len(saved.alarms) for family in FAMILY_ORDER for saved in self.saved_alarms[family])
