"""Adds baseline CloudWatch alarms to AWS resources that do not have them yet."""

__version__ = "1.0.0"
