from typing import Optional

import yaml
from pydantic import BaseModel

from .settings import AzureSettings, SampleOptions


class SettingsFile(BaseModel):
    """Settings file layout: an `azure` section and an optional `sample` section."""

    azure: dict = {}
    sample: dict = {}


def load_settings_file(config_path: str) -> tuple[AzureSettings, SampleOptions]:
    """Load settings from a YAML file.

    Keys present in the file override environment variables; keys the file
    leaves out still come from the environment or their defaults.
    """
    with open(config_path, "r") as f:
        raw: Optional[dict] = yaml.safe_load(f)

    config = SettingsFile.model_validate(raw or {})

    return AzureSettings(**config.azure), SampleOptions(**config.sample)
