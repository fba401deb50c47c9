"""
metacache configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the METACACHE_ENV_FILE environment variable
"""

import functools
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "metacache_"


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    db_name: Annotated[
        str,
        Field(
            description="SQLite database file holding the file records (use :memory: for a throwaway database)",
        ),
    ] = "metacache.db"

    uploads_dir: Annotated[
        Path,
        Field(
            description="Directory that uploaded files are written to. Cache keys are paths relative to its parent",
        ),
    ] = Path("uploads")

    initial_capacity: Annotated[
        int,
        Field(
            ge=1,
            description="Initial number of buckets of the in-memory metadata table",
        ),
    ] = 16

    load_factor: Annotated[
        float,
        Field(
            gt=0,
            description="The metadata table doubles its capacity when entries / buckets exceeds this ratio",
        ),
    ] = 0.75

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")
