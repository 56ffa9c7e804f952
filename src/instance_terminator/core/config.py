"""Configuration management with AWS SSM Parameter Store support."""
import json
import os
from typing import Optional

import boto3
from botocore.exceptions import ClientError
from pydantic import ValidationError

from .errors import ConfigurationError
from .logger import log_with_context, setup_logger
from .models import TerminatorConfig

logger = setup_logger(__name__)

CONFIG_PARAM_ENV = "INSTANCE_TERMINATOR_CONFIG_PARAM"


def load_config_from_ssm(parameter_name: str, region: Optional[str] = None) -> TerminatorConfig:
    """Read a JSON TerminatorConfig stored in an SSM parameter.

    Args:
        parameter_name: Name of the SSM parameter, possibly a SecureString
        region: AWS region (defaults to AWS_REGION env var or us-east-1)

    Raises:
        ConfigurationError: If the parameter is missing, unreadable or invalid
    """
    region = region or os.environ.get("AWS_REGION", "us-east-1")
    ssm = boto3.client("ssm", region_name=region)

    try:
        response = ssm.get_parameter(Name=parameter_name, WithDecryption=True)
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") == "ParameterNotFound":
            raise ConfigurationError(f"SSM parameter not found: {parameter_name}") from e
        raise ConfigurationError(f"Failed to load SSM parameter {parameter_name}: {str(e)}") from e

    log_with_context(logger, "info", "Read terminator settings", parameter=parameter_name)
    return parse_config(response["Parameter"]["Value"])


def parse_config(config_json: str) -> TerminatorConfig:
    """Parse JSON configuration string into TerminatorConfig.

    Args:
        config_json: JSON string containing configuration

    Returns:
        Parsed TerminatorConfig

    Raises:
        ConfigurationError: If JSON is invalid or doesn't match schema
    """
    try:
        config_dict = json.loads(config_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON configuration: {str(e)}") from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError("Configuration validation failed: expected a JSON object")

    try:
        return TerminatorConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {str(e)}") from e


def get_config(ssm_parameter: Optional[str] = None) -> TerminatorConfig:
    """Resolve the configuration for one invocation.

    The SSM parameter named by the argument or INSTANCE_TERMINATOR_CONFIG_PARAM
    is used when set; an unreadable parameter falls back to the defaults so
    the rotation still runs. DRY_RUN then overrides whatever was resolved.
    """
    param_name = ssm_parameter or os.environ.get(CONFIG_PARAM_ENV)

    config = TerminatorConfig()
    if param_name:
        try:
            config = load_config_from_ssm(param_name)
        except ConfigurationError as e:
            log_with_context(
                logger, "warning", "Falling back to default terminator settings",
                parameter=param_name, error=str(e),
            )

    dry_run = _dry_run_override(os.environ.get("DRY_RUN", ""))
    if dry_run is not None:
        config.dry_run = dry_run

    log_with_context(
        logger, "info", "Terminator settings resolved",
        source=param_name or "defaults",
        **config.model_dump(),
    )
    return config


def _dry_run_override(value: str) -> Optional[bool]:
    value = value.lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return None
