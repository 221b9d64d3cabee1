from os import environ
from aws_lambda_powertools import Logger

# Retrieve environment variables with fallbacks
app_name: str = environ.get('app', 'cloudwatch-auto')
log_level: str = environ.get('powertools_log_level', 'INFO')  # Default to 'INFO'

# Initialize the logger with service name and log level
logger = Logger(
    service=app_name,
    level=log_level
)

logger.debug(f"Logger initialized with service: {app_name}, level: {log_level}")
