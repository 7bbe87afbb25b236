"""
Tests for the bulk ingestion pipeline.
"""

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from src.core.documents.domain.document import DocumentStatus, UserDocument
from src.core.documents.infrastructure.repositories.sql_document_repository import (
    SqlDocumentRepository,
)
from src.core.ingestion.application.bulk_ingestion import BulkIngestionPipeline
from src.core.ingestion.domain.upload import IncomingFile, SharedMetadata
from src.core.storage.infrastructure.memory_store import InMemoryContentStore
from src.shared.exceptions import NotFoundError, StorageError, ValidationError
from src.shared.identifiers import encode_folder_id
from tests.helpers import OWNER

MAX_SIZE = 1024


def _file(name: str, size: int = 10, content_type: str = "text/plain") -> IncomingFile:
    return IncomingFile(name=name, content_type=content_type, size=size, data=b"x" * size)


@pytest.fixture
def pipeline(session_factory, storage):
    return BulkIngestionPipeline(
        session_factory=session_factory,
        storage=storage,
        max_size_bytes=MAX_SIZE,
        batch_size=2,
    )


async def _documents(session_factory, owner_id=OWNER):
    async with session_factory() as session:
        result = await session.execute(
            select(UserDocument).where(
                UserDocument.owner_id == owner_id,
                UserDocument.is_folder_placeholder.is_(False),
            )
        )
        return list(result.scalars().all())


class TestIsolation:
    async def test_oversized_file_fails_alone(self, pipeline, session_factory):
        files = [_file(f"file-{i}.txt") for i in range(5)]
        files[2] = _file("huge.bin", size=MAX_SIZE + 1)

        result = await pipeline.ingest(OWNER, files)

        assert result.summary.total == 5
        assert result.summary.successful == 4
        assert result.summary.failed == 1
        assert result.summary.success_rate == 80
        assert result.results[2].status == "error"
        assert "exceeds the maximum size" in result.results[2].error
        assert [r.index for r in result.results] == [0, 1, 2, 3, 4]

        stored = await _documents(session_factory)
        assert len(stored) == 4
        succeeded = {r.document.id for r in result.results if r.status == "success"}
        assert {d.id for d in stored} == succeeded

    async def test_missing_fields_are_per_file_errors(self, pipeline):
        files = [
            _file("ok.txt"),
            IncomingFile(name="", content_type="text/plain", size=3, data=b"abc"),
            IncomingFile(name="notype", content_type="", size=3, data=b"abc"),
            IncomingFile(name="empty.txt", content_type="text/plain", size=0, data=b""),
        ]

        result = await pipeline.ingest(OWNER, files)

        assert [r.status for r in result.results] == ["success", "error", "error", "error"]
        assert result.summary.success_rate == 25

    async def test_upload_failure_creates_no_record(self, session_factory, storage):
        original_put = storage.put

        async def flaky_put(key, data, content_type):
            if "broken" in key:
                raise StorageError("connection reset", key=key)
            await original_put(key, data, content_type)

        storage.put = flaky_put
        pipeline = BulkIngestionPipeline(session_factory, storage, MAX_SIZE)

        result = await pipeline.ingest(OWNER, [_file("a.txt"), _file("broken.txt"), _file("c.txt")])

        assert [r.status for r in result.results] == ["success", "error", "success"]
        assert result.results[1].error == "connection reset"
        titles = {d.title for d in await _documents(session_factory)}
        assert titles == {"a.txt", "c.txt"}

    async def test_failed_verification_is_an_error(self, session_factory):
        class ForgetfulStore(InMemoryContentStore):
            async def exists(self, key):
                return "lost" not in key

        storage = ForgetfulStore()
        pipeline = BulkIngestionPipeline(session_factory, storage, MAX_SIZE)

        result = await pipeline.ingest(OWNER, [_file("lost.txt"), _file("kept.txt")])

        assert result.results[0].status == "error"
        assert "verification failed" in result.results[0].error
        assert result.results[1].status == "success"
        assert [d.title for d in await _documents(session_factory)] == ["kept.txt"]

    async def test_insert_failure_leaves_blob_in_place(self, session_factory, storage):
        class FailingRepository(SqlDocumentRepository):
            async def add(self, document):
                if document.file_name == "reject.txt":
                    raise SQLAlchemyError("insert failed")
                return await super().add(document)

        pipeline = BulkIngestionPipeline(
            session_factory, storage, MAX_SIZE, repository_factory=FailingRepository
        )

        result = await pipeline.ingest(OWNER, [_file("reject.txt"), _file("fine.txt")])

        assert result.results[0].status == "error"
        assert result.results[1].status == "success"
        assert any("reject.txt" in key for key in storage.objects)

    async def test_unexpected_exception_becomes_error_result(self, session_factory, storage):
        async def broken_exists(key):
            raise RuntimeError("boom")

        storage.exists = broken_exists
        pipeline = BulkIngestionPipeline(session_factory, storage, MAX_SIZE)

        result = await pipeline.ingest(OWNER, [_file("a.txt")])

        assert result.summary.failed == 1
        assert result.results[0].error == "boom"

    async def test_everything_failing_still_returns_summary(self, pipeline):
        files = [_file(f"{i}.bin", size=MAX_SIZE * 2) for i in range(3)]

        result = await pipeline.ingest(OWNER, files)

        assert result.summary.successful == 0
        assert result.summary.failed == 3
        assert result.summary.success_rate == 0


class TestBatching:
    async def test_batches_run_sequentially_with_bounded_concurrency(self, session_factory):
        active = 0
        peak = 0

        class SlowStore(InMemoryContentStore):
            async def put(self, key, data, content_type):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                await super().put(key, data, content_type)

        pipeline = BulkIngestionPipeline(session_factory, SlowStore(), MAX_SIZE, batch_size=3)

        result = await pipeline.ingest(OWNER, [_file(f"{i}.txt") for i in range(7)])

        assert result.summary.successful == 7
        assert peak == 3

    async def test_results_keep_input_order(self, session_factory):
        class ReversedLatencyStore(InMemoryContentStore):
            async def put(self, key, data, content_type):
                # Earlier files finish last
                index = int(key.rsplit("-", 2)[-2])
                await asyncio.sleep(0.01 * (5 - index))
                await super().put(key, data, content_type)

        pipeline = BulkIngestionPipeline(session_factory, ReversedLatencyStore(), MAX_SIZE)
        names = [f"f{i}.txt" for i in range(5)]

        result = await pipeline.ingest(OWNER, [_file(n) for n in names])

        assert [r.file_name for r in result.results] == names
        assert [r.index for r in result.results] == list(range(5))


class TestRecords:
    async def test_records_carry_shared_metadata(self, pipeline, folder_service, session_factory):
        folder = await folder_service.create_folder(OWNER, "Contracts")

        result = await pipeline.ingest(
            OWNER,
            [_file("a b#c.pdf", content_type="application/pdf")],
            SharedMetadata(description="Q3", tags=["legal", "legal", "2024"], folder_id=folder.id),
        )

        document = result.results[0].document
        assert result.category == "Contracts"
        assert document.title == "a b#c.pdf"
        assert document.category == "Contracts"
        assert document.description == "Q3"
        assert document.tags == ["legal", "2024"]
        assert document.status == DocumentStatus.DRAFT
        assert not document.is_folder_placeholder
        assert document.file_size == 10
        assert document.content_key.startswith(f"{OWNER}/")
        assert document.content_key.endswith("-0-a_b_c.pdf")

    async def test_default_target_is_general(self, pipeline, session_factory):
        result = await pipeline.ingest(OWNER, [_file("a.txt")])

        assert result.category == "General"
        assert result.results[0].document.category == "General"

    async def test_category_name_resolves_case_insensitively(self, pipeline, folder_service):
        await folder_service.create_folder(OWNER, "Contracts")

        result = await pipeline.ingest(OWNER, [_file("a.txt")], SharedMetadata(category="contracts"))

        assert result.category == "Contracts"

    async def test_unknown_target_fails_before_any_upload(self, pipeline, storage):
        with pytest.raises(NotFoundError):
            await pipeline.ingest(
                OWNER, [_file("a.txt")], SharedMetadata(folder_id=encode_folder_id("Missing"))
            )
        assert storage.objects == {}

    async def test_empty_request_is_rejected(self, pipeline):
        with pytest.raises(ValidationError):
            await pipeline.ingest(OWNER, [])

    async def test_completion_event(self, session_factory, storage):
        events = []

        class RecordingDispatcher:
            async def emit(self, name, owner_id, **payload):
                events.append((name, payload))

        pipeline = BulkIngestionPipeline(
            session_factory, storage, MAX_SIZE, event_dispatcher=RecordingDispatcher()
        )

        await pipeline.ingest(OWNER, [_file("a.txt"), _file("b.txt", size=MAX_SIZE + 5)])

        names = [name for name, _ in events]
        assert names.count("document.uploaded") == 1
        assert names[-1] == "bulk_upload.completed"
        assert events[-1][1]["successful"] == 1
        assert events[-1][1]["failed"] == 1
