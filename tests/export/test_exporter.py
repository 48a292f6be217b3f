"""Tests for point-in-time CSV export."""

from __future__ import annotations

import gzip
from datetime import datetime, timezone
from pathlib import Path

import pytest

from spanner_pitr.database.models import Column, ColumnType, Record
from spanner_pitr.errors import ExportError, QueryError, StreamConsumedError, TargetNotFoundError
from spanner_pitr.export import QueryExporter, export_records, is_compressed, stream_records
from spanner_pitr.result import Err, Ok

AT = datetime(2020, 6, 1, 10, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def two_rows(records):
    return [records.strings(id="a", value="x"), records.strings(id="b", value="y")]


class TestExportRecords:
    """CSV serialization of a point-in-time read."""

    def test_writes_header_and_rows(self, fake_client, two_rows, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: two_rows)
        destination = tmp_path / "orders.csv"

        outcome = export_records("SELECT id, value FROM T", AT, destination, client)

        assert isinstance(outcome, Ok)
        assert destination.read_text(encoding="utf-8") == '"id","value"\n"a","x"\n"b","y"\n'
        assert outcome.value.rows == 2
        assert outcome.value.columns == ("id", "value")
        assert outcome.value.compressed is False
        assert client.calls == [AT]

    def test_gzip_output_decompresses_to_same_csv(self, fake_client, two_rows, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: two_rows)
        destination = tmp_path / "orders.csv.gz"

        outcome = export_records("SELECT id, value FROM T", AT, destination, client)

        assert isinstance(outcome, Ok)
        assert outcome.value.compressed is True
        with gzip.open(destination, "rt", encoding="utf-8", newline="") as handle:
            assert handle.read() == '"id","value"\n"a","x"\n"b","y"\n'

    def test_empty_result_writes_empty_file(self, fake_client, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: [])
        destination = tmp_path / "empty.csv"

        outcome = export_records("SELECT id FROM T WHERE false", AT, destination, client)

        assert isinstance(outcome, Ok)
        assert outcome.value.rows == 0
        assert outcome.value.columns == ()
        assert destination.exists()
        assert destination.read_text(encoding="utf-8") == ""

    def test_one_line_per_record_plus_header(self, fake_client, records, tmp_path: Path) -> None:
        rows = [records.strings(id=str(i)) for i in range(25)]
        client = fake_client(lambda query, at: rows)
        destination = tmp_path / "many.csv"

        export_records("SELECT id FROM T", AT, destination, client)

        assert len(destination.read_text(encoding="utf-8").splitlines()) == 26

    def test_null_written_as_unquoted_empty_field(self, fake_client, tmp_path: Path) -> None:
        columns = (Column("id", ColumnType.STRING), Column("note", ColumnType.STRING))
        client = fake_client(lambda query, at: [Record(columns, ("a", None)), Record(columns, ("b", ""))])
        destination = tmp_path / "nulls.csv"

        export_records("SELECT id, note FROM T", AT, destination, client)

        assert destination.read_text(encoding="utf-8") == '"id","note"\n"a",\n"b",""\n'

    def test_embedded_quotes_are_doubled(self, fake_client, records, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: [records.strings(text='say "hi", ok')])
        destination = tmp_path / "quotes.csv"

        export_records("SELECT text FROM T", AT, destination, client)

        assert destination.read_text(encoding="utf-8") == '"text"\n"say ""hi"", ok"\n'

    def test_renders_typed_columns(self, fake_client, tmp_path: Path) -> None:
        columns = (
            Column("flag", ColumnType.BOOL),
            Column("n", ColumnType.INT64),
            Column("blob", ColumnType.BYTES),
            Column("tags", ColumnType.ARRAY),
        )
        client = fake_client(lambda query, at: [Record(columns, (True, 42, b"raw", ["a", "b"]))])
        destination = tmp_path / "typed.csv"

        export_records("SELECT * FROM T", AT, destination, client)

        assert destination.read_text(encoding="utf-8") == '"flag","n","blob","tags"\n"true","42","raw",\n'

    def test_repeated_and_unnamed_columns_keep_every_value(self, fake_client, tmp_path: Path) -> None:
        columns = (
            Column("Id", ColumnType.INT64),
            Column("Id", ColumnType.INT64),
            Column("", ColumnType.STRING),
            Column("", ColumnType.STRING),
        )
        client = fake_client(lambda query, at: [Record(columns, (1, 2, "x", "y"))])
        destination = tmp_path / "joined.csv"

        outcome = export_records("SELECT a.Id, b.Id, 'x', 'y' FROM A a JOIN B b", AT, destination, client)

        assert isinstance(outcome, Ok)
        assert outcome.value.columns == ("Id", "Id", "", "")
        assert destination.read_text(encoding="utf-8") == '"Id","Id","",""\n"1","2","x","y"\n'

    def test_open_failure_returns_err(self, fake_client, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: TargetNotFoundError("Database not found: orders"))
        destination = tmp_path / "out.csv"

        outcome = export_records("SELECT 1", AT, destination, client)

        assert isinstance(outcome, Err)
        assert isinstance(outcome.exception, TargetNotFoundError)
        assert not destination.exists()

    def test_first_row_failure_closes_cursor(self, fake_client, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: [QueryError("Table not found: T")])

        outcome = export_records("SELECT 1 FROM T", AT, tmp_path / "out.csv", client)

        assert isinstance(outcome, Err)
        assert client.open_cursors == 0
        assert client.closed_cursors == 1

    def test_mid_stream_failure_returns_err(self, fake_client, records, tmp_path: Path) -> None:
        rows = [records.strings(id="a"), QueryError("stream reset")]
        client = fake_client(lambda query, at: rows)

        outcome = export_records("SELECT id FROM T", AT, tmp_path / "out.csv", client)

        assert isinstance(outcome, Err)
        assert outcome.error == "stream reset"
        assert client.open_cursors == 0

    def test_unexpected_mid_stream_failure_is_query_error(self, fake_client, records, tmp_path: Path) -> None:
        rows = [records.strings(id="a"), RuntimeError("socket closed")]
        client = fake_client(lambda query, at: rows)

        outcome = export_records("SELECT id FROM T", AT, tmp_path / "out.csv", client)

        assert isinstance(outcome, Err)
        assert isinstance(outcome.exception, QueryError)
        assert client.open_cursors == 0

    def test_unwritable_destination(self, fake_client, two_rows, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: two_rows)

        outcome = export_records("SELECT id FROM T", AT, tmp_path / "missing" / "out.csv", client)

        assert isinstance(outcome, Err)
        assert isinstance(outcome.exception, ExportError)
        assert client.open_cursors == 0

    def test_query_exporter_uses_its_output_file(self, fake_client, two_rows, tmp_path: Path) -> None:
        client = fake_client(lambda query, at: two_rows)
        exporter = QueryExporter("SELECT id, value FROM T", AT, str(tmp_path / "q.csv"), client)

        outcome = exporter.export_records()

        assert isinstance(outcome, Ok)
        assert outcome.value.destination == tmp_path / "q.csv"


class TestRecordStream:
    """Single-pass lazy record streams."""

    def test_yields_all_records_then_closes(self, fake_client, two_rows) -> None:
        client = fake_client(lambda query, at: two_rows)

        stream = stream_records("SELECT id, value FROM T", AT, client).unwrap()

        assert client.open_cursors == 1
        assert [record.get("id") for record in stream] == ["a", "b"]
        assert stream.closed
        assert client.open_cursors == 0

    def test_second_iteration_fails(self, fake_client, two_rows) -> None:
        client = fake_client(lambda query, at: two_rows)
        stream = stream_records("SELECT id FROM T", AT, client).unwrap()

        list(stream)

        with pytest.raises(StreamConsumedError):
            iter(stream)

    def test_abandoned_stream_releases_cursor(self, fake_client, two_rows) -> None:
        client = fake_client(lambda query, at: two_rows)

        with stream_records("SELECT id FROM T", AT, client).unwrap() as stream:
            next(iter(stream))

        assert client.open_cursors == 0
        stream.close()
        assert client.closed_cursors == 1

    def test_unexpected_open_failure_is_query_error(self, fake_client) -> None:
        client = fake_client(lambda query, at: RuntimeError("connection reset"))

        outcome = stream_records("SELECT 1", AT, client)

        assert isinstance(outcome, Err)
        assert isinstance(outcome.exception, QueryError)
        assert outcome.error == "connection reset"

    def test_query_exporter_streams(self, fake_client, two_rows) -> None:
        client = fake_client(lambda query, at: two_rows)

        outcome = QueryExporter("SELECT id FROM T", AT, "unused.csv", client).stream_records()

        assert isinstance(outcome, Ok)
        assert len(list(outcome.value)) == 2


@pytest.mark.parametrize(
    ("name", "expected"),
    [("out.csv.gz", True), ("out.gz", True), ("out.csv", False), ("out.gzip", False), ("gz", False)],
)
def test_is_compressed(name: str, expected: bool) -> None:
    assert is_compressed(name) is expected
