import pytest

from src.core.ingestion.domain.upload import (
    BulkSummary,
    FileResult,
    IncomingFile,
    build_storage_key,
    sanitize_file_name,
    validate_incoming_file,
)
from src.core.utils.batching import batch_by_count, indexed_batches
from src.shared.exceptions import ValidationError


@pytest.mark.parametrize(
    "name,expected",
    [
        ("report.pdf", "report.pdf"),
        ("my report (v2).pdf", "my_report__v2_.pdf"),
        ("été.txt", "_t_.txt"),
        ("a-b_c.tar.gz", "a-b_c.tar.gz"),
    ],
)
def test_sanitize_file_name(name, expected):
    assert sanitize_file_name(name) == expected


def test_storage_keys():
    assert build_storage_key("u1", "a b.txt", timestamp_ms=1700) == "u1/1700-a_b.txt"
    assert build_storage_key("u1", "a b.txt", index=3, timestamp_ms=1700) == "u1/1700-3-a_b.txt"


def test_storage_key_defaults_to_current_time():
    key = build_storage_key("u1", "x.txt")

    timestamp = key.split("/", 1)[1].split("-", 1)[0]
    assert timestamp.isdigit()


def test_summary_rounds_success_rate():
    results = [
        FileResult.failure(0, "a", "bad"),
        FileResult.failure(1, "b", "bad"),
        FileResult.success(2, "c", document=None),
    ]

    summary = BulkSummary.from_results(results)

    assert (summary.total, summary.successful, summary.failed) == (3, 1, 2)
    assert summary.success_rate == 33


def test_summary_of_nothing():
    assert BulkSummary.from_results([]).success_rate == 0


class TestValidateIncomingFile:
    def test_accepts_file_at_limit(self):
        validate_incoming_file(IncomingFile("a.txt", "text/plain", size=100), max_size_bytes=100)

    def test_rejects_file_over_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_incoming_file(
                IncomingFile("a.txt", "text/plain", size=52428801), max_size_bytes=52428800
            )
        assert "50 MB" in exc_info.value.message

    @pytest.mark.parametrize(
        "file",
        [
            IncomingFile("", "text/plain", size=1),
            IncomingFile("a.txt", "", size=1),
            IncomingFile("a.txt", "text/plain", size=0),
        ],
    )
    def test_rejects_incomplete_file(self, file):
        with pytest.raises(ValidationError):
            validate_incoming_file(file, max_size_bytes=100)


class TestBatching:
    def test_batch_by_count(self):
        assert batch_by_count([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
        assert batch_by_count([], 5) == []

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            batch_by_count([1], 0)

    def test_indexed_batches_keep_positions(self):
        batches = indexed_batches(["a", "b", "c"], 2)

        assert batches == [[(0, "a"), (1, "b")], [(2, "c")]]
