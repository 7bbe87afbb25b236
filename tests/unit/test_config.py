import pytest
from pydantic import ValidationError

from src.api.config import Settings, UploadSettings


@pytest.mark.parametrize("field", ["batch_size", "max_size_mb"])
@pytest.mark.parametrize("value", [0, -1])
def test_upload_limits_must_be_positive(field, value):
    with pytest.raises(ValidationError):
        UploadSettings(**{field: value})


def test_upload_batch_size_from_environment(monkeypatch):
    monkeypatch.setenv("UPLOAD_BATCH_SIZE", "0")

    with pytest.raises(ValidationError):
        UploadSettings()

    monkeypatch.setenv("UPLOAD_BATCH_SIZE", "3")
    assert UploadSettings().batch_size == 3


def test_upload_defaults():
    uploads = UploadSettings()

    assert uploads.batch_size == 5
    assert uploads.max_size_bytes == 50 * 1024 * 1024


def test_cors_origins_from_comma_separated_string():
    settings = Settings(cors_origins="http://a.test, http://b.test,")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]
