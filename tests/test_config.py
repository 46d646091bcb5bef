from pathlib import Path

import pytest
from pydantic import ValidationError

from logship.config import UploaderConfig
from logship.core.constants import (
    DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
    S3_ENDPOINT_IS_UNDEFINED,
)


@pytest.mark.unit
def test_defaults() -> None:
    config = UploaderConfig(bucket="b")

    assert config.endpoint == S3_ENDPOINT_IS_UNDEFINED
    assert config.endpoint_url is None
    assert config.shutdown_timeout_seconds == DEFAULT_SHUTDOWN_TIMEOUT_SECONDS == 600
    assert config.prefix_timestamp is False
    assert config.prefix_identifier is False
    assert config.has_static_credentials is False


@pytest.mark.unit
@pytest.mark.parametrize(
    ("endpoint", "expected"),
    [
        (S3_ENDPOINT_IS_UNDEFINED, None),
        ("", None),
        (None, None),
        ("http://minio:9000", "http://minio:9000"),
    ],
)
def test_endpoint_url(endpoint, expected) -> None:
    assert UploaderConfig(bucket="b", endpoint=endpoint).endpoint_url == expected


@pytest.mark.unit
def test_blank_access_key_is_not_static() -> None:
    assert UploaderConfig(bucket="b", access_key="   ").has_static_credentials is False
    assert UploaderConfig(bucket="b", access_key="AK").has_static_credentials is True


@pytest.mark.unit
def test_config_is_immutable() -> None:
    config = UploaderConfig(bucket="b")
    with pytest.raises(ValidationError):
        config.bucket = "other"  # type: ignore[misc]


@pytest.mark.unit
def test_secret_hidden_from_repr() -> None:
    config = UploaderConfig(bucket="b", access_key="AK", secret_key="very-secret")
    assert "very-secret" not in repr(config)


@pytest.mark.unit
def test_validation_errors() -> None:
    with pytest.raises(ValidationError):
        UploaderConfig(bucket="")
    with pytest.raises(ValidationError):
        UploaderConfig(bucket="b", unknown_field=1)
    with pytest.raises(ValidationError):
        UploaderConfig(bucket="b", shutdown_timeout_seconds=0)


@pytest.mark.unit
def test_with_overrides_ignores_none() -> None:
    config = UploaderConfig(bucket="b", folder="logs")
    updated = config.with_overrides(folder=None, region="eu-west-1", prefix_timestamp=True)

    assert updated.folder == "logs"
    assert updated.region == "eu-west-1"
    assert updated.prefix_timestamp is True
    assert config.region is None


@pytest.mark.unit
def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGSHIP_BUCKET", "env-bucket")
    monkeypatch.setenv("LOGSHIP_ACCESS_KEY", "AK")
    monkeypatch.setenv("LOGSHIP_SECRET_KEY", "SK")
    monkeypatch.setenv("LOGSHIP_REGION", "eu-central-1")
    monkeypatch.setenv("LOGSHIP_FOLDER", "logs/%d{yyyy}")
    monkeypatch.setenv("LOGSHIP_ENDPOINT", "http://localhost:9000")
    monkeypatch.setenv("LOGSHIP_PREFIX_TIMESTAMP", "true")
    monkeypatch.setenv("LOGSHIP_PREFIX_IDENTIFIER", "1")
    monkeypatch.setenv("LOGSHIP_SHUTDOWN_TIMEOUT_SECONDS", "30")

    config = UploaderConfig.from_env()

    assert config.bucket == "env-bucket"
    assert config.access_key == "AK"
    assert config.secret_key == "SK"
    assert config.region == "eu-central-1"
    assert config.folder == "logs/%d{yyyy}"
    assert config.endpoint_url == "http://localhost:9000"
    assert config.prefix_timestamp is True
    assert config.prefix_identifier is True
    assert config.shutdown_timeout_seconds == 30.0


@pytest.mark.unit
def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGSHIP_BUCKET", "env-bucket")
    monkeypatch.setenv("LOGSHIP_PREFIX_TIMESTAMP", "no")

    config = UploaderConfig.from_env()

    assert config.endpoint == S3_ENDPOINT_IS_UNDEFINED
    assert config.prefix_timestamp is False
    assert config.shutdown_timeout_seconds == 600


@pytest.mark.unit
def test_from_env_requires_bucket() -> None:
    with pytest.raises(ValueError, match="LOGSHIP_BUCKET"):
        UploaderConfig.from_env()


@pytest.mark.unit
def test_from_yaml_top_level(tmp_path: Path) -> None:
    path = tmp_path / "logship.yaml"
    path.write_text(
        "bucket: yaml-bucket\nfolder: logs/%d{yyyy/MM}\nprefix_identifier: true\n",
        encoding="utf-8",
    )

    config = UploaderConfig.from_yaml(path)

    assert config.bucket == "yaml-bucket"
    assert config.folder == "logs/%d{yyyy/MM}"
    assert config.prefix_identifier is True


@pytest.mark.unit
def test_from_yaml_nested_section(tmp_path: Path) -> None:
    path = tmp_path / "app.yaml"
    path.write_text(
        "service: api\nlogship:\n  bucket: nested\n  region: us-west-2\n",
        encoding="utf-8",
    )

    config = UploaderConfig.from_yaml(path)

    assert config.bucket == "nested"
    assert config.region == "us-west-2"


@pytest.mark.unit
def test_from_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        UploaderConfig.from_yaml(path)
