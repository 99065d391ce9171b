from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings
from sanic.log import logger


class Config(BaseSettings):
    SPINNAKER_API: str
    SPINNAKER_APPLICATION: str
    SPINNAKER_PIPELINE: str

    AUTH_METHOD: str = ""

    LDAP_USERNAME: str = ""
    LDAP_PASSWORD: str = ""

    X509_CERT: str = ""
    X509_KEY: str = ""

    OVERRIDE_LOGGING: Literal[
        "CRITICAL",
        "FATAL",
        "ERROR",
        "WARNING",
        "WARN",
        "INFO",
        "DEBUG",
        "NOTSET",
    ] = "INFO"

    @field_validator("SPINNAKER_API")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def print_config(self):
        """Print configuration values with sensitive attributes masked"""
        sensitive_attrs = {
            "LDAP_PASSWORD",
            "X509_CERT",
            "X509_KEY",
        }

        logger.info("=== Spinnaker Resource Configuration ===")
        for field_name, field_value in self.model_dump().items():
            if field_name in sensitive_attrs:
                logger.info(f"{field_name}: ***")
            else:
                logger.info(f"{field_name}: {field_value}")
        logger.info("========================================")


def configure_logging(config: Config):
    logger.setLevel(config.OVERRIDE_LOGGING)
