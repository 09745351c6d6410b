"""
Reader for the daily activity files.

``ActivityService.log`` appends one JSON line per action to
``activity-<YYYY-MM-DD>.log`` (see ``core.logging_config``).  This module
reads those files back for the ``/api/file-activity`` endpoints.  The
files are merged, sorted newest first and filtered in memory, so every
read is capped at ``READ_LIMIT`` entries.
"""

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..core.logging_config import ACTIVITY_FILE_PREFIX, ACTIVITY_FILE_SUFFIX

logger = logging.getLogger(__name__)

READ_LIMIT = 10000
EXPORT_LIMIT = 50000
TOP_N = 10


def _parse_time(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_file_size(size: int) -> str:
    """``1536`` -> ``"1.5 KB"``."""
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{round(value, 2):g} {unit}"
        value /= 1024
    return f"{round(value, 2):g} GB"


def _log_files(directory: Optional[str]) -> List[Path]:
    if not directory:
        return []
    path = Path(directory)
    if not path.is_dir():
        return []
    return sorted(path.glob(f"{ACTIVITY_FILE_PREFIX}*{ACTIVITY_FILE_SUFFIX}"), reverse=True)


def _read_file(path: Path) -> List[Dict[str, Any]]:
    entries = []
    with path.open(encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except ValueError:
                continue
            if isinstance(entry, dict):
                entries.append(entry)
    return entries


class FileActivityService:
    """Query the activity files of one directory."""

    @classmethod
    async def read_logs(
        cls,
        directory: Optional[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = READ_LIMIT,
    ) -> List[Dict[str, Any]]:
        """Entries between ``start_date`` and ``end_date``, newest first.

        Lines that are not JSON objects are skipped.  A file that cannot
        be read is reported and left out.
        """
        entries: List[Dict[str, Any]] = []
        for path in _log_files(directory):
            try:
                entries.extend(_read_file(path))
            except OSError:
                logger.warning("Could not read activity file %s", path, exc_info=True)

        oldest = datetime.min.replace(tzinfo=timezone.utc)
        entries.sort(key=lambda entry: _parse_time(entry.get("timestamp")) or oldest, reverse=True)

        start, end = _parse_time(start_date), _parse_time(end_date)
        if start or end:
            filtered = []
            for entry in entries:
                stamp = _parse_time(entry.get("timestamp"))
                if stamp is None or (start and stamp < start) or (end and stamp > end):
                    continue
                filtered.append(entry)
            entries = filtered
        return entries[:limit]

    @classmethod
    async def list_logs(
        cls,
        directory: Optional[str],
        user_id: Optional[str] = None,
        module: Optional[str] = None,
        action: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[Dict[str, Any]], int]:
        entries = await cls.read_logs(directory, start_date, end_date)
        wanted = {"user_id": user_id, "module": module, "action": action}
        for key, value in wanted.items():
            if value:
                entries = [entry for entry in entries if entry.get(key) == value]
        offset = (page - 1) * limit
        return entries[offset:offset + limit], len(entries)

    @classmethod
    async def user_logs(
        cls,
        directory: Optional[str],
        user_id: str,
        limit: int = 20,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        entries = await cls.read_logs(directory, start_date, end_date)
        return [entry for entry in entries if entry.get("user_id") == user_id][:limit]

    @classmethod
    async def stats(
        cls,
        directory: Optional[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        entries = await cls.read_logs(directory, start_date, end_date)
        by_module: Counter = Counter()
        by_user: Counter = Counter()
        by_day: Counter = Counter()
        by_hour: Counter = Counter()
        users = set()
        addresses = set()
        for entry in entries:
            by_module[entry.get("module")] += 1
            by_user[entry.get("user_name")] += 1
            stamp = _parse_time(entry.get("timestamp"))
            if stamp is not None:
                by_day[stamp.date().isoformat()] += 1
                by_hour[stamp.hour] += 1
            users.add(entry.get("user_id"))
            if entry.get("ip_address"):
                addresses.add(entry["ip_address"])
        return {
            "totalActions": len(entries),
            "actionsByModule": dict(by_module),
            "actionsByUser": dict(by_user),
            "actionsByDay": dict(by_day),
            "actionsByHour": dict(by_hour),
            "topUsers": [{"user": user, "count": count} for user, count in by_user.most_common(TOP_N)],
            "topModules": [
                {"module": module, "count": count} for module, count in by_module.most_common(TOP_N)
            ],
            "uniqueUsersCount": len(users),
            "uniqueIPsCount": len(addresses),
        }

    @classmethod
    async def export(
        cls,
        directory: Optional[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        entries = await cls.read_logs(directory, start_date, end_date, limit=EXPORT_LIMIT)
        return {
            "data": entries,
            "exportInfo": {
                "totalRecords": len(entries),
                "exportDate": datetime.now(timezone.utc).isoformat(),
                "dateRange": {"startDate": start_date, "endDate": end_date},
            },
        }

    @classmethod
    async def files_info(cls, directory: Optional[str]) -> Dict[str, Any]:
        files = []
        for path in _log_files(directory):
            stat = path.stat()
            files.append(
                {
                    "name": path.name,
                    "size": stat.st_size,
                    "sizeFormatted": format_file_size(stat.st_size),
                    "modified": datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(),
                }
            )
        files.sort(key=lambda item: item["modified"], reverse=True)
        total = sum(item["size"] for item in files)
        return {
            "files": files,
            "totalFiles": len(files),
            "totalSize": total,
            "totalSizeFormatted": format_file_size(total),
        }
