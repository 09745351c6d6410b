import json
import logging

import pytest

from startech_api.app.core import logging_config
from startech_api.app.services.file_activity_service import format_file_size

from .conftest import USERS, headers_for

ADMIN = headers_for("admin")
TECH = headers_for("tech")


def _write_day(directory, day, entries, extra_lines=()):
    directory.mkdir(parents=True, exist_ok=True)
    lines = [json.dumps(entry) for entry in entries] + list(extra_lines)
    (directory / f"activity-{day}.log").write_text("\n".join(lines) + "\n", encoding="utf-8")


def _entry(timestamp, user_id="u-tech", user_name="Arben Tech", module="orders", action="CREATE", ip="10.0.0.1"):
    return {
        "timestamp": timestamp,
        "user_id": user_id,
        "user_name": user_name,
        "module": module,
        "action": action,
        "ip_address": ip,
    }


def _read_lines(activity_dir):
    lines = []
    for path in sorted(activity_dir.glob("activity-*.log")):
        lines += [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]
    return lines


def test_mutation_appends_json_line(client, activity_dir):
    created = client.post(
        "/api/customers/", json={"name": "Ana", "email": "ana@example.com"}, headers=TECH
    ).json()["data"]

    lines = _read_lines(activity_dir)
    assert len(lines) == 1
    entry = lines[0]
    assert entry["user_id"] == USERS["tech"]["id"]
    assert entry["user_name"] == "Arben Tech"
    assert entry["action"] == "CREATE"
    assert entry["module"] == "customers"
    assert entry["entity_id"] == created["id"]
    assert entry["details"] == {"name": "Ana"}
    assert entry["method"] == "POST"
    assert entry["url"] == "/api/customers/"
    assert entry["timestamp"]


def test_written_entries_are_listed(client):
    client.post("/api/tickets/", json={"title": "a"}, headers=TECH)
    client.post("/api/customers/", json={"name": "Ana", "email": "ana@example.com"}, headers=TECH)

    listed = client.get("/api/file-activity/file-activity-logs?module=tickets", headers=TECH).json()
    assert listed["pagination"]["total"] == 1
    assert listed["data"][0]["module"] == "tickets"


def test_files_are_merged_newest_first_and_bad_lines_skipped(client, activity_dir):
    _write_day(activity_dir, "2024-05-01", [_entry("2024-05-01T08:00:00+00:00")], ["{not json", "[1, 2]"])
    _write_day(
        activity_dir,
        "2024-05-02",
        [_entry("2024-05-02T09:00:00+00:00", module="tasks"), _entry("2024-05-02T07:00:00+00:00")],
    )

    logs = client.get("/api/file-activity/file-activity-logs", headers=TECH).json()
    assert [log["timestamp"] for log in logs["data"]] == [
        "2024-05-02T09:00:00+00:00",
        "2024-05-02T07:00:00+00:00",
        "2024-05-01T08:00:00+00:00",
    ]

    page = client.get("/api/file-activity/file-activity-logs?limit=2&page=2", headers=TECH).json()
    assert page["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}
    assert len(page["data"]) == 1


def test_date_range_filter(client, activity_dir):
    _write_day(
        activity_dir,
        "2024-05-01",
        [_entry("2024-05-01T08:00:00+00:00"), _entry("2024-05-01T18:00:00+00:00")],
    )
    _write_day(activity_dir, "2024-05-03", [_entry("2024-05-03T08:00:00+00:00")])

    logs = client.get(
        "/api/file-activity/file-activity-logs?startDate=2024-05-01T12:00:00&endDate=2024-05-02",
        headers=TECH,
    ).json()
    assert [log["timestamp"] for log in logs["data"]] == ["2024-05-01T18:00:00+00:00"]


def test_user_logs_are_limited(client, activity_dir):
    _write_day(
        activity_dir,
        "2024-05-01",
        [
            _entry("2024-05-01T08:00:00+00:00"),
            _entry("2024-05-01T09:00:00+00:00", user_id="u-other", user_name="Blerta Tech"),
            _entry("2024-05-01T10:00:00+00:00"),
        ],
    )
    logs = client.get("/api/file-activity/file-activity-logs/u-tech?limit=1", headers=TECH).json()["data"]
    assert [log["timestamp"] for log in logs] == ["2024-05-01T10:00:00+00:00"]


def test_stats(client, activity_dir):
    _write_day(
        activity_dir,
        "2024-05-01",
        [
            _entry("2024-05-01T08:15:00+00:00"),
            _entry("2024-05-01T08:45:00+00:00", module="tasks"),
            _entry("2024-05-01T14:00:00+00:00", user_id="u-other", user_name="Blerta Tech", ip="10.0.0.2"),
        ],
    )
    assert client.get("/api/file-activity/file-activity-stats", headers=TECH).status_code == 403

    stats = client.get("/api/file-activity/file-activity-stats", headers=ADMIN).json()["data"]
    assert stats["totalActions"] == 3
    assert stats["actionsByModule"] == {"orders": 2, "tasks": 1}
    assert stats["actionsByUser"] == {"Arben Tech": 2, "Blerta Tech": 1}
    assert stats["actionsByDay"] == {"2024-05-01": 3}
    assert stats["actionsByHour"] == {"8": 2, "14": 1}
    assert stats["topUsers"][0] == {"user": "Arben Tech", "count": 2}
    assert stats["topModules"][0] == {"module": "orders", "count": 2}
    assert stats["uniqueUsersCount"] == 2
    assert stats["uniqueIPsCount"] == 2


def test_empty_directory(client):
    assert client.get("/api/file-activity/file-activity-logs", headers=TECH).json()["data"] == []
    stats = client.get("/api/file-activity/file-activity-stats", headers=ADMIN).json()["data"]
    assert stats["totalActions"] == 0
    assert stats["uniqueUsersCount"] == 0


def test_export_and_files_info(client, activity_dir):
    _write_day(activity_dir, "2024-05-01", [_entry("2024-05-01T08:00:00+00:00")])
    _write_day(activity_dir, "2024-05-02", [_entry("2024-05-02T08:00:00+00:00")])

    exported = client.get("/api/file-activity/export-file-logs?startDate=2024-05-02", headers=ADMIN).json()
    assert len(exported["data"]) == 1
    assert exported["exportInfo"]["totalRecords"] == 1
    assert exported["exportInfo"]["dateRange"] == {"startDate": "2024-05-02", "endDate": None}

    info = client.get("/api/file-activity/log-files-info", headers=ADMIN).json()["data"]
    assert info["totalFiles"] == 2
    assert {item["name"] for item in info["files"]} == {"activity-2024-05-01.log", "activity-2024-05-02.log"}
    assert info["totalSize"] == sum(item["size"] for item in info["files"])
    assert client.get("/api/file-activity/log-files-info", headers=TECH).status_code == 403


def test_handler_switches_file_on_new_day(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_config, "_utc_day", lambda: "2024-05-01")
    logger = logging_config.setup_activity_log(str(tmp_path))
    logger.info('{"n": 1}')
    monkeypatch.setattr(logging_config, "_utc_day", lambda: "2024-05-02")
    logger.info('{"n": 2}')
    logging_config.setup_activity_log(None)

    assert (tmp_path / "activity-2024-05-01.log").read_text(encoding="utf-8") == '{"n": 1}\n'
    assert (tmp_path / "activity-2024-05-02.log").read_text(encoding="utf-8") == '{"n": 2}\n'


def test_activity_logger_does_not_propagate(tmp_path):
    logger = logging_config.setup_activity_log(str(tmp_path))
    assert logger.propagate is False
    assert logger is logging.getLogger(logging_config.ACTIVITY_LOGGER_NAME)
    logging_config.setup_activity_log(None)


@pytest.mark.parametrize(
    "size, expected", [(0, "0 B"), (512, "512 B"), (1536, "1.5 KB"), (10 * 1024 * 1024, "10 MB")]
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
