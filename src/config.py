import os
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.policy import CancelDepthPolicy, ReaddPolicy
from models.snapshot import DEFAULT_BOOK_LEVELS


def get_env_file() -> str:
    """Determine which .env file to load based on APP_ENV."""
    app_env = os.getenv("APP_ENV", "").lower()
    if app_env == "local":
        return ".env.local"
    elif app_env == "prod":
        return ".env.prod"
    return ".env"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=get_env_file(), extra="ignore")

    log_level: str = "INFO"
    log_json: bool = True

    # Where the MBP CSV goes when no output path is given on the command line
    output_path: str = "mbp_output.csv"

    # Number of visible price levels per side (MBP-10)
    book_levels: int = Field(default=DEFAULT_BOOK_LEVELS, ge=1)

    # Re-adding a resident order id; "overwrite" matches the established output
    readd_policy: ReaddPolicy = ReaddPolicy.OVERWRITE

    # Cancel depth; "after_removal" always reports 0, matching the established output
    cancel_depth_policy: CancelDepthPolicy = CancelDepthPolicy.AFTER_REMOVAL
