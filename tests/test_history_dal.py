"""
Tests for the analysis history store.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from dal.history_dal import HISTORY_KEY, HistoryStore, InMemoryStorage, SQLiteKeyValueStorage
from models.analysis_record import IMAGE_ANALYSIS, VOICE_ANALYSIS, AnalysisRecord, ImageDiagnosis, VoiceRecommendation
from utils.database_init import AsyncDatabaseInitializer

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def history(storage):
    return HistoryStore(storage)


class TestHistoryStore:
    """Test cases for HistoryStore."""

    async def test_empty_history(self, history):
        assert await history.list() == []

    async def test_records_come_back_newest_first(self, history):
        """Records added with dates t1 < t2 < t3 are listed t3, t2, t1."""
        dates = [NOW, NOW + timedelta(hours=1), NOW + timedelta(hours=2)]
        for index, date in enumerate(dates):
            await history.add(VOICE_ANALYSIS, "data:audio/webm;base64,AA==", VoiceRecommendation(f"tip {index}"), date)

        records = await history.list()

        assert [record.date for record in records] == list(reversed(dates))
        assert [record.output.text for record in records] == ["tip 2", "tip 1", "tip 0"]

    async def test_list_sorts_out_of_order_dates(self, history):
        await history.add(VOICE_ANALYSIS, "data:,", VoiceRecommendation("later"), NOW + timedelta(days=1))
        await history.add(VOICE_ANALYSIS, "data:,", VoiceRecommendation("earlier"), NOW)

        assert [record.output.text for record in await history.list()] == ["later", "earlier"]

    async def test_ids_are_unique(self, history):
        first = await history.add(VOICE_ANALYSIS, "data:,", VoiceRecommendation("a"))
        second = await history.add(VOICE_ANALYSIS, "data:,", VoiceRecommendation("a"))
        assert first.id != second.id

    async def test_round_trip_keeps_output_shape(self, history):
        diagnosis = ImageDiagnosis("Tomato with early blight", "Remove affected leaves; apply copper fungicide.")
        record = await history.add(IMAGE_ANALYSIS, "data:image/png;base64,AA==", diagnosis, NOW)

        stored = await history.get(record.id)

        assert stored == record
        assert isinstance(stored.output, ImageDiagnosis)
        assert stored.date.tzinfo is not None

    async def test_get_missing_record(self, history):
        assert await history.get("missing") is None

    async def test_mismatched_output_is_rejected(self, history):
        with pytest.raises(ValueError):
            await history.add(IMAGE_ANALYSIS, "data:,", VoiceRecommendation("not a diagnosis"))
        assert await history.list() == []

    @pytest.mark.parametrize("raw", ["not json", '{"id": 1}', '[{"type": "image"}]', '[{"type": "video"}]'])
    async def test_corrupted_history_reads_as_empty(self, raw):
        history = HistoryStore(InMemoryStorage({HISTORY_KEY: raw}))
        assert await history.list() == []

    async def test_add_after_corruption_starts_fresh(self):
        storage = InMemoryStorage({HISTORY_KEY: "garbage"})
        history = HistoryStore(storage)

        await history.add(VOICE_ANALYSIS, "data:,", VoiceRecommendation("fresh"))

        assert len(json.loads(storage.values[HISTORY_KEY])) == 1

    async def test_clear(self, history, storage):
        await history.add(VOICE_ANALYSIS, "data:,", VoiceRecommendation("a"))
        await history.clear()
        assert await history.list() == []
        assert HISTORY_KEY not in storage.values

    async def test_naive_dates_are_read_as_utc(self):
        payload = [
            {
                "id": "abc",
                "type": "voice",
                "input": "data:,",
                "output": {"text": "Mist daily."},
                "date": "2024-05-01T12:00:00",
            }
        ]
        history = HistoryStore(InMemoryStorage({HISTORY_KEY: json.dumps(payload)}))

        (record,) = await history.list()

        assert record.date == NOW


class TestAnalysisRecord:
    """Test cases for the record model."""

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            AnalysisRecord(id="1", type="video", input="", output=VoiceRecommendation("x"), date=NOW)

    def test_to_dict(self):
        record = AnalysisRecord(id="1", type=VOICE_ANALYSIS, input="data:,", output=VoiceRecommendation("x"), date=NOW)
        assert record.to_dict() == {
            "id": "1",
            "type": "voice",
            "input": "data:,",
            "output": {"text": "x"},
            "date": "2024-05-01T12:00:00+00:00",
        }


class TestSQLiteStorage:
    """Test cases for the aiosqlite-backed storage."""

    async def test_history_persists_across_instances(self, tmp_path):
        first = HistoryStore(SQLiteKeyValueStorage(AsyncDatabaseInitializer(tmp_path)))
        record = await first.add(VOICE_ANALYSIS, "data:,", VoiceRecommendation("Repot in spring."), NOW)

        second = HistoryStore(SQLiteKeyValueStorage(AsyncDatabaseInitializer(tmp_path)))

        assert await second.get(record.id) == record
        assert (tmp_path / "app.db").exists()

    async def test_overwrite_and_clear(self, tmp_path):
        storage = SQLiteKeyValueStorage(AsyncDatabaseInitializer(tmp_path))
        await storage.write("k", "one")
        await storage.write("k", "two")
        assert await storage.read("k") == "two"

        await storage.clear("k")
        assert await storage.read("k") is None

    def test_database_dir_must_be_a_directory(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(RuntimeError):
            AsyncDatabaseInitializer(target)
