from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from chartship.config import DEFAULT_REPO_URL, PipelineConfig
from chartship.errors import ConfigError


def test_from_env_reads_variables() -> None:
    config = PipelineConfig.from_env(
        {
            "OCI_REGISTRY": "oci://registry.example.com/charts",
            "GPG_KEY": "Release Bot",
            "GPG_KEYRING": "/keys/secring.gpg",
            "CHART_REPO_URL": "https://charts.acme.io",
        }
    )
    assert config.require_registry() == "oci://registry.example.com/charts"
    assert config.require_signing_key() == "Release Bot"
    assert config.keyring == Path("/keys/secring.gpg")
    assert config.repo_url == "https://charts.acme.io"


def test_defaults() -> None:
    config = PipelineConfig.from_env({})
    assert config.registry is None
    assert config.repo_url == DEFAULT_REPO_URL
    assert config.keyring == Path("~/.gnupg/secring.gpg").expanduser()
    assert config.chart_dir == Path(".")


def test_overrides_win_over_environment() -> None:
    config = PipelineConfig.from_env({"OCI_REGISTRY": "oci://a"}, registry="oci://b", chart_dir="charts/x")
    assert config.registry == "oci://b"
    assert config.chart_dir == Path("charts/x")


def test_blank_values_are_unset() -> None:
    config = PipelineConfig.from_env({"OCI_REGISTRY": "  ", "GPG_KEY": ""})
    with pytest.raises(ConfigError) as err:
        config.require_registry()
    assert err.value.variable == "OCI_REGISTRY"
    assert "publish-oci" in err.value.hint
    with pytest.raises(ConfigError):
        config.require_signing_key()


def test_config_is_immutable() -> None:
    config = PipelineConfig()
    with pytest.raises(ValidationError):
        config.registry = "oci://late"
