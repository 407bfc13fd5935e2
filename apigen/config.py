# apigen/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"

    # Directive markers looked up in the input module
    VALIDATOR_PREFIX: str = "apivalidator:"
    ROUTE_PREFIX: str = "apigen:api"

    # Authorization convention enforced by the generated dispatch functions
    AUTH_HEADER: str = "X-Auth"
    AUTH_TOKEN: str = "100500"

    model_config = SettingsConfigDict(env_prefix="APIGEN_", extra="ignore")
