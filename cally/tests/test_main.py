from __future__ import annotations

import json
from pathlib import Path

import pytest

from cally.main import main


@pytest.fixture
def data_file(tmp_path: Path) -> str:
    records = [
        {"id": "1", "date": "2024-05-01", "time": "10:00 AM", "serviceType": "haircut",
         "serviceName": "Haircut & Styling", "clientName": "Alex Johnson", "location": "Style Studio"},
        {"id": "2", "date": "2024-05-03", "time": "02:00 PM", "serviceType": "dental",
         "serviceName": "Dental Checkup", "location": "Smile Dental Clinic", "notes": "Regular 6-month checkup"},
    ]
    path = tmp_path / "appointments.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def _no_cally_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Keep a developer's .env out of the CLI runs.
    monkeypatch.chdir(tmp_path)


def test_day_lists_slots(data_file: str, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--data", data_file, "--today", "2024-05-01", "day", "2024-05-01"])

    out = capsys.readouterr().out
    assert code == 0
    assert "8 of 9 slots available on 2024-05-01" in out
    assert "10:00 AM  booked (Haircut & Styling)" in out


def test_month_marks_today_and_pads(data_file: str, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--data", data_file, "--today", "2024-05-03", "month", "--pad"])

    lines = capsys.readouterr().out.splitlines()
    assert code == 0
    assert lines[0] == "2024-05: 2 appointments"
    assert lines[1].startswith("2024-04-28 Sun")
    assert any(line.startswith("2024-05-03 Fri*") and "02:00 PM Dental Checkup" in line for line in lines)


def test_agenda_groups_upcoming(data_file: str, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--data", data_file, "--today", "2024-05-01", "agenda", "--search", "smile"])

    out = capsys.readouterr().out
    assert code == 0
    assert "0 today, 1 upcoming" in out
    assert "Friday, May 03:" in out


def test_book_conflict_exits_with_failure(data_file: str, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--data", data_file, "book", "2024-05-01", "10:00 AM", "haircut", "Cut"])

    out = capsys.readouterr().out
    assert code == 1
    assert "is already booked" in out
    assert "09:00 AM is available" in out


def test_book_and_cancel(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["book", "2024-05-01", "9:00 am", "spa", "Massage", "--client", "Taylor Reed"]) == 0
    assert "Confirmation number: apt_" in capsys.readouterr().out

    assert main(["cancel", "apt_missing"]) == 1
    assert "not found" in capsys.readouterr().out


def test_invalid_seed_file_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([
        {"id": "1", "date": "2024-05-01", "time": "10:00 AM", "serviceType": "spa", "serviceName": "A"},
        {"id": "2", "date": "2024-05-01", "time": "10:00", "serviceType": "spa", "serviceName": "B"},
    ]), encoding="utf-8")

    assert main(["--data", str(path), "day", "2024-05-01"]) == 1
    assert "collides with 1" in capsys.readouterr().out


def test_missing_seed_file_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "nope.json"

    assert main(["--data", str(path), "--today", "2024-05-01", "agenda"]) == 1
    assert f"Cannot read {path}" in capsys.readouterr().out


def test_broken_json_seed_file_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    assert main(["--data", str(path), "--today", "2024-05-01", "agenda"]) == 1
    assert f"Cannot read {path}" in capsys.readouterr().out
