from __future__ import annotations

import pytest

from hydex.errors import ConfigurationError, RerankUnavailable
from hydex.rerank.config import DEFAULT_RERANK_MODEL, DEFAULT_VOYAGE_BASE_URL, RerankSettings


def test_settings_load_from_env_with_defaults() -> None:
    settings = RerankSettings.from_env({"VOYAGE_API_KEY": "pa-test"})

    assert settings.api_key == "pa-test"
    assert settings.model == DEFAULT_RERANK_MODEL
    assert settings.base_url == DEFAULT_VOYAGE_BASE_URL


def test_missing_api_key_is_rerank_unavailable() -> None:
    with pytest.raises(RerankUnavailable, match="VOYAGE_API_KEY") as error:
        RerankSettings.from_env({"RERANK_MODEL": "rerank-2-lite"})

    assert error.value.stage == "rerank"


def test_base_url_must_be_http() -> None:
    with pytest.raises(ConfigurationError, match="VOYAGE_BASE_URL"):
        RerankSettings.from_env({"VOYAGE_API_KEY": "pa-test", "VOYAGE_BASE_URL": "ftp://voyage"})
