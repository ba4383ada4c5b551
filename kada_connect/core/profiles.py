"""In-memory profile store for companies and students/trainees.

Records are plain dicts. Readers always receive copies so callers cannot
mutate stored state. An optional JSON seed file provides initial data:

    {"companies": [{...}, ...], "students": [{...}, ...]}
"""
from __future__ import annotations
import copy
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from kada_connect.core.matching import split_multi_value
from kada_connect.core.reference_data import normalize_text

logger = logging.getLogger(__name__)

OPEN_TO_WORK = "Open to work"
EMPLOYED = "Employed"
EMPLOYMENT_STATUSES = (OPEN_TO_WORK, EMPLOYED)

COMPANY_FIELDS = (
    "company_name",
    "industry_sector",
    "tech_roles_interest",
    "description",
    "website",
    "contact_email",
    "logo",
)
STUDENT_FIELDS = (
    "full_name",
    "email",
    "university_institution",
    "program_major",
    "tech_stack_skills",
    "preferred_industry",
    "employment_status",
    "profile_photo",
    "cv_url",
)
MULTI_VALUE_FIELDS = {"industry_sector", "tech_roles_interest", "tech_stack_skills", "preferred_industry"}


class ProfileStoreError(Exception):
    """Raised when the profile store cannot serve a request."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean(data: dict, fields: tuple[str, ...]) -> dict:
    """Keep known fields only; multi-value fields become lists."""
    cleaned = {}
    for name in fields:
        if name not in data:
            continue
        value = data[name]
        if name in MULTI_VALUE_FIELDS:
            value = split_multi_value(value)
        elif isinstance(value, str):
            value = normalize_text(value)
        cleaned[name] = value
    return cleaned


def _record_id(raw) -> int:
    try:
        record_id = int(raw)
    except (TypeError, ValueError) as exc:
        raise ProfileStoreError(f"Invalid profile id {raw!r}") from exc
    if record_id < 1:
        raise ProfileStoreError(f"Invalid profile id {raw!r}")
    return record_id


class _Collection:
    """Id-keyed record map guarded by the repository lock."""

    def __init__(self, fields: tuple[str, ...], defaults: dict):
        self.fields = fields
        self.defaults = defaults
        self.records: dict[int, dict] = {}
        self.next_id = 1

    def insert(self, data: dict, owner_id: Optional[str]) -> dict:
        record = dict(self.defaults)
        record.update(_clean(data, self.fields))
        record_id = _record_id(data["id"]) if data.get("id") is not None else self.next_id
        self.next_id = max(self.next_id, record_id + 1)
        timestamp = _now()
        record.update(id=record_id, owner_id=owner_id, created_at=timestamp, updated_at=timestamp)
        self.records[record_id] = record
        return copy.deepcopy(record)

    def update(self, record_id: int, data: dict) -> Optional[dict]:
        record = self.records.get(record_id)
        if record is None:
            return None
        record.update(_clean(data, self.fields))
        record["updated_at"] = _now()
        return copy.deepcopy(record)


class InMemoryProfileRepository:
    """Thread-safe in-memory store used by the CRUD and lookup layers."""

    def __init__(self, companies: Optional[list[dict]] = None, students: Optional[list[dict]] = None):
        self._lock = threading.Lock()
        self._companies = _Collection(COMPANY_FIELDS, {
            "industry_sector": [],
            "tech_roles_interest": [],
            "description": "",
            "website": "",
            "contact_email": "",
            "logo": "",
        })
        self._students = _Collection(STUDENT_FIELDS, {
            "email": "",
            "university_institution": "",
            "program_major": "",
            "tech_stack_skills": [],
            "preferred_industry": [],
            "employment_status": OPEN_TO_WORK,
            "profile_photo": "",
            "cv_url": "",
        })
        for company in companies or []:
            self.create_company(company, owner_id=company.get("owner_id"))
        for student in students or []:
            self.create_student(student, owner_id=student.get("owner_id"))

    @classmethod
    def from_seed_file(cls, path: str) -> "InMemoryProfileRepository":
        """Build a repository from a JSON seed file."""
        seed_path = Path(path)
        if not seed_path.is_file():
            raise ProfileStoreError(f"Profile seed file not found: {path}")
        try:
            with seed_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise ProfileStoreError(f"Invalid profile seed file {path}: {exc}") from exc

        if not isinstance(payload, dict):
            raise ProfileStoreError(f"Profile seed file {path} must contain a JSON object")

        try:
            repository = cls(payload.get("companies") or [], payload.get("students") or [])
        except ProfileStoreError as exc:
            raise ProfileStoreError(f"Invalid profile seed file {path}: {exc}") from exc
        logger.info(
            "Loaded profile seed: %d companies, %d students from %s",
            len(repository._companies.records),
            len(repository._students.records),
            path,
        )
        return repository

    # Companies -----------------------------------------------------------

    def list_companies(self) -> list[dict]:
        with self._lock:
            return [copy.deepcopy(record) for record in self._companies.records.values()]

    def get_company(self, company_id: int) -> Optional[dict]:
        with self._lock:
            record = self._companies.records.get(company_id)
            return copy.deepcopy(record) if record else None

    def create_company(self, data: dict, owner_id: Optional[str] = None) -> dict:
        with self._lock:
            return self._companies.insert(data, owner_id)

    def update_company(self, company_id: int, data: dict) -> Optional[dict]:
        with self._lock:
            return self._companies.update(company_id, data)

    def delete_company(self, company_id: int) -> bool:
        with self._lock:
            return self._companies.records.pop(company_id, None) is not None

    # Students ------------------------------------------------------------

    def list_students(self, open_to_work_only: bool = False) -> list[dict]:
        with self._lock:
            return [
                copy.deepcopy(record)
                for record in self._students.records.values()
                if not open_to_work_only or record.get("employment_status") == OPEN_TO_WORK
            ]

    def get_student(self, student_id: int) -> Optional[dict]:
        with self._lock:
            record = self._students.records.get(student_id)
            return copy.deepcopy(record) if record else None

    def create_student(self, data: dict, owner_id: Optional[str] = None) -> dict:
        with self._lock:
            return self._students.insert(data, owner_id)

    def update_student(self, student_id: int, data: dict) -> Optional[dict]:
        with self._lock:
            return self._students.update(student_id, data)

    def delete_student(self, student_id: int) -> bool:
        with self._lock:
            return self._students.records.pop(student_id, None) is not None
