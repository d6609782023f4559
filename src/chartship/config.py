from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigError

ENV_REGISTRY = "OCI_REGISTRY"
ENV_SIGNING_KEY = "GPG_KEY"
ENV_KEYRING = "GPG_KEYRING"
ENV_REPO_URL = "CHART_REPO_URL"

DEFAULT_KEYRING = "~/.gnupg/secring.gpg"
DEFAULT_REPO_URL = "https://charts.example.com"
DEFAULT_EXAMPLE_VALUES = "values.example.yaml"


class PipelineConfig(BaseModel):
    """Inputs supplied by the operator for one run. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    chart_dir: Path = Field(default_factory=lambda: Path("."))
    registry: Optional[str] = None
    signing_key: Optional[str] = None
    keyring: Path = Field(default_factory=lambda: Path(DEFAULT_KEYRING).expanduser())
    repo_url: str = DEFAULT_REPO_URL
    example_values: str = DEFAULT_EXAMPLE_VALUES

    @field_validator("registry", "signing_key", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("keyring", mode="before")
    @classmethod
    def _expand_keyring(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            value = DEFAULT_KEYRING
        return Path(value).expanduser()

    @field_validator("repo_url", mode="before")
    @classmethod
    def _default_repo_url(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_REPO_URL
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> "PipelineConfig":
        """
        Build a config from environment variables.

        Explicit keyword overrides win over the environment; overrides whose
        value is None are ignored.
        """
        env = os.environ if environ is None else environ
        values = {
            "registry": env.get(ENV_REGISTRY),
            "signing_key": env.get(ENV_SIGNING_KEY),
            "keyring": env.get(ENV_KEYRING),
            "repo_url": env.get(ENV_REPO_URL),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def require_registry(self) -> str:
        if not self.registry:
            raise ConfigError(
                f"{ENV_REGISTRY} environment variable not set",
                variable=ENV_REGISTRY,
                hint=(
                    "Usage: chartship run publish-oci --registry oci://registry.example.com/charts\n"
                    f"   or: {ENV_REGISTRY}=oci://registry.example.com/charts chartship run publish-oci"
                ),
            )
        return self.registry

    def require_signing_key(self) -> str:
        if not self.signing_key:
            raise ConfigError(
                f"{ENV_SIGNING_KEY} environment variable not set; refusing to build an unsigned package",
                variable=ENV_SIGNING_KEY,
                hint=f"Usage: {ENV_SIGNING_KEY}='Your Key Name' chartship run package-sign",
            )
        return self.signing_key
