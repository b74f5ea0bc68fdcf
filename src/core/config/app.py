"""
Application-specific settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and logging.

    Performance Note:
        - LOG_JSON should stay enabled in deployed environments so that log
          shippers can index the structured key/value context.
    """
    PROJECT_NAME: str = "identity-orchestrator"
    VERSION: str = "0.1.0"
    APP_ENV: str = Field(default="development", pattern="^(development|test|staging|production)$")
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
