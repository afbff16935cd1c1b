from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from marta_tracker.data.arrival_log import ArrivalLog, serialize_arrivals
from marta_tracker.data.models import ArrivalRecord, NearTermArrival
from marta_tracker.errors import LogWriteError, MarshalError, StartupError


def _arrival(train_id: str, station: str = "Five Points", waiting: int = 45) -> NearTermArrival:
    return NearTermArrival(ArrivalRecord(train_id, station, str(waiting)), waiting)


def test_serialize_is_compact_and_keeps_string_waiting_time() -> None:
    line = serialize_arrivals([_arrival("101")])

    assert line == '[{"train_id":"101","station":"Five Points","waiting_seconds":"45"}]'


def test_serialize_keeps_non_ascii() -> None:
    line = serialize_arrivals([_arrival("7", station="Peachtree Cntr ✓")])

    assert "✓" in line


def test_serialize_failure_raises_marshal_error() -> None:
    with patch("marta_tracker.data.arrival_log.json.dumps", side_effect=TypeError("bad")):
        with pytest.raises(MarshalError):
            serialize_arrivals([_arrival("1")])


def test_append_writes_one_line_per_batch(tmp_path) -> None:
    path = tmp_path / "out.log"

    with ArrivalLog.open(str(path)) as log:
        assert log.append([_arrival("1"), _arrival("2", waiting=10)]) == 2
        assert log.append([_arrival("3")]) == 1

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert [row["train_id"] for row in json.loads(lines[0])] == ["1", "2"]
    assert json.loads(lines[1])[0]["waiting_seconds"] == "45"


def test_open_appends_to_existing_file(tmp_path) -> None:
    path = tmp_path / "out.log"
    path.write_text("previous\n", encoding="utf-8")

    with ArrivalLog.open(str(path)) as log:
        log.append([_arrival("9")])

    assert path.read_text(encoding="utf-8").startswith("previous\n[")


def test_append_syncs_to_disk(tmp_path) -> None:
    with ArrivalLog.open(str(tmp_path / "out.log")) as log:
        with patch("marta_tracker.data.arrival_log.os.fsync") as mock_fsync:
            log.append([_arrival("1")])

    mock_fsync.assert_called_once()


def test_append_os_error_raises_log_write_error(tmp_path) -> None:
    with ArrivalLog.open(str(tmp_path / "out.log")) as log:
        with patch("marta_tracker.data.arrival_log.os.fsync", side_effect=OSError("disk full")):
            with pytest.raises(LogWriteError):
                log.append([_arrival("1")])


def test_open_failure_is_startup_error(tmp_path) -> None:
    with pytest.raises(StartupError) as exc_info:
        ArrivalLog.open(str(tmp_path / "missing-dir" / "out.log"))

    assert exc_info.value.category == "startup"


def test_lone_surrogate_raises_marshal_error_before_writing(tmp_path) -> None:
    path = tmp_path / "out.log"
    arrival = NearTermArrival(ArrivalRecord("\ud800", "Five Points", "45"), 45)

    with ArrivalLog.open(str(path)) as log:
        with pytest.raises(MarshalError) as exc_info:
            log.append([arrival])

    assert exc_info.value.category == "data"
    assert path.read_text(encoding="utf-8") == ""
