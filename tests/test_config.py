from __future__ import annotations

import pytest
import yaml

from graphsource.config import SourcingConfig, load_config
from graphsource.core.errors import ConfigurationError


def test_defaults():
    config = SourcingConfig()

    assert config.url is None
    assert config.languages == ["EN"]
    assert config.type_prefix == "Drupal"
    assert config.concurrency == 1
    assert config.page_size == 100
    assert config.fragment_depth == 2


def test_from_dict_normalizes_values():
    config = SourcingConfig.from_dict({
        "url": "https://drupal.test/graphql",
        "languages": "ES",
        "timeout": "12",
        "concurrency": "3",
        "headers": None,
    })

    assert config.languages == ["ES"]
    assert config.timeout == 12.0
    assert config.concurrency == 3
    assert config.headers == {}


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "graphsource.yaml"
    config = SourcingConfig(
        url="https://drupal.test/graphql",
        languages=["EN", "ES"],
        fragments_dir="src/drupal-fragments",
        filters={"NodeArticle": {"conditions": [{"field": "status", "value": ["1"]}]}},
    )

    config.save(path)

    assert yaml.safe_load(path.read_text())["url"] == "https://drupal.test/graphql"
    assert load_config(path) == config


def test_load_missing_file_returns_none(tmp_path):
    assert load_config(tmp_path / "missing.yaml") is None


def test_load_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "graphsource.yaml"
    path.write_text("")

    assert load_config(path) == SourcingConfig()


def test_load_rejects_non_mapping(tmp_path):
    path = tmp_path / "graphsource.yaml"
    path.write_text("- EN\n- ES\n")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(path)


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"url": None}, "url"),
        ({"languages": []}, "languages"),
        ({"concurrency": 0}, "concurrency"),
        ({"page_size": 0}, "page_size"),
        ({"fragment_depth": -1}, "fragment_depth"),
    ],
)
def test_validate_rejects_invalid_values(changes, message):
    config = SourcingConfig(url="https://drupal.test/graphql")
    for key, value in changes.items():
        setattr(config, key, value)

    with pytest.raises(ConfigurationError, match=message):
        config.validate()


def test_validate_accepts_complete_config():
    SourcingConfig(url="https://drupal.test/graphql").validate()
