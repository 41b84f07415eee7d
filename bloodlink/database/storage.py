"""
Entity repository

- One EntityStore per entity type with list/find/get_by_id/create/update
- Backends are swappable: in-memory lists (tests) or one JSON file per
  collection (demo deployments), fronted by a TTL cache
- Raw records are decoded through the pydantic schemas at this boundary;
  malformed records are logged and skipped instead of leaking half-typed data
- Services depend only on Repository, so a SQL backend can replace these
  without touching matching/referral logic
"""
import copy
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from bloodlink.core.dates import utcnow
from bloodlink.core.errors import ConflictError, NotFoundError
from bloodlink.database.cache import TTLCache
from bloodlink.database.schemas import (
    Appointment,
    Donor,
    Hospital,
    Notification,
    Recipient,
    Record,
    Referral,
    ReferralStatus,
    User,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Record)

# Fields owned by the repository, never taken from caller-supplied data
PROTECTED_FIELDS = frozenset({"id", "created_at", "version"})


def read_json(filepath: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read JSON file, return empty list if not found or unreadable
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    except json.JSONDecodeError as e:
        logger.warning("Ignoring unreadable JSON file %s: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Ignoring JSON file %s: expected a list, got %s", path, type(data).__name__)
        return []
    return data


def write_json(filepath: Union[str, Path], data: List[Dict[str, Any]]):
    """
    Write data to JSON file (via a temporary file so readers never see half a write)
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + '.tmp')
    with open(tmp_path, 'w') as f:
        json.dump(data, f, indent=2)
    os.replace(tmp_path, path)


class MemoryBackend:
    """
    Raw records kept in a list; copies are handed out so callers never
    mutate stored state in place
    """
    def __init__(self):
        self._records: List[Dict[str, Any]] = []

    def load(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._records)

    def save(self, records: List[Dict[str, Any]]):
        self._records = copy.deepcopy(records)


class JsonFileBackend:
    """
    Raw records kept in one JSON file per collection
    """
    def __init__(self, filepath: Union[str, Path], cache: Optional[TTLCache] = None):
        self.filepath = Path(filepath)
        self.cache = cache or TTLCache(ttl_seconds=60)
        self._cache_key = str(self.filepath)

    def load(self) -> List[Dict[str, Any]]:
        cached = self.cache.get(self._cache_key)
        if cached is None:
            cached = read_json(self.filepath)
            self.cache.set(self._cache_key, cached)
        return copy.deepcopy(cached)

    def save(self, records: List[Dict[str, Any]]):
        write_json(self.filepath, records)
        self.cache.set(self._cache_key, copy.deepcopy(records))


class EntityStore(Generic[ModelT]):
    """
    CRUD access to one entity type
    """
    def __init__(self, model: Type[ModelT], entity_name: str, backend):
        self.model = model
        self.entity_name = entity_name
        self.backend = backend

    def _decode(self, raw: Any) -> Optional[ModelT]:
        try:
            return self.model.model_validate(raw)
        except ValidationError as e:
            record_id = raw.get('id') if isinstance(raw, dict) else None
            logger.warning(
                "Skipping malformed %s record %s: %s",
                self.entity_name, record_id, e.errors(include_url=False),
            )
            return None

    def list(self) -> List[ModelT]:
        entities = []
        for raw in self.backend.load():
            entity = self._decode(raw)
            if entity is not None:
                entities.append(entity)
        return entities

    def find(self, entity_id: str) -> Optional[ModelT]:
        """
        Return the entity, or None if it does not exist
        """
        for raw in self.backend.load():
            if isinstance(raw, dict) and raw.get('id') == entity_id:
                return self._decode(raw)
        return None

    def get_by_id(self, entity_id: str) -> ModelT:
        """
        Return the entity, raise NotFoundError if it does not exist
        """
        entity = self.find(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    def filter(self, **fields: Any) -> List[ModelT]:
        """
        Entities whose attributes equal all given values
        """
        return [
            entity for entity in self.list()
            if all(getattr(entity, name) == value for name, value in fields.items())
        ]

    def create(self, data: Mapping[str, Any], entity_id: Optional[str] = None) -> ModelT:
        """
        Validate and store a new entity with timestamps

        The id is generated unless entity_id is given (user accounts keep the
        id issued by the identity provider). Raises ConflictError if that id
        is already taken and pydantic ValidationError when data does not fit
        the schema.
        """
        if entity_id is not None and self.find(entity_id) is not None:
            raise ConflictError(f"{self.entity_name} {entity_id} already exists")
        now = data.get('created_at') or utcnow()
        payload = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}
        payload.update({
            'id': entity_id or str(uuid.uuid4()),
            'created_at': now,
            'updated_at': data.get('updated_at') or now,
            'version': 1,
        })
        entity = self.model.model_validate(payload)

        records = self.backend.load()
        records.append(entity.model_dump(mode="json"))
        self.backend.save(records)
        return entity

    def update(self, entity_id: str, changes: Mapping[str, Any],
               expected_version: Optional[int] = None) -> ModelT:
        """
        Apply a partial update and bump version and updated_at

        If expected_version is given and the stored record has moved on,
        ConflictError is raised and nothing is written.
        """
        records = self.backend.load()
        for index, raw in enumerate(records):
            if not isinstance(raw, dict) or raw.get('id') != entity_id:
                continue

            current = self._decode(raw)
            if current is None:
                raise NotFoundError(self.entity_name, entity_id)
            if expected_version is not None and current.version != expected_version:
                raise ConflictError(
                    f"{self.entity_name} {entity_id} was modified concurrently "
                    f"(expected version {expected_version}, found {current.version})"
                )

            merged = current.model_dump()
            merged.update({key: value for key, value in changes.items() if key not in PROTECTED_FIELDS})
            merged['updated_at'] = changes.get('updated_at') or utcnow()
            merged['version'] = current.version + 1
            updated = self.model.model_validate(merged)

            records[index] = updated.model_dump(mode="json")
            self.backend.save(records)
            return updated

        raise NotFoundError(self.entity_name, entity_id)

    def count(self) -> int:
        return len(self.list())


class ReferralStore(EntityStore[Referral]):
    def update_status(self, referral_id: str, status: ReferralStatus,
                      expected_version: Optional[int] = None, **changes: Any) -> Referral:
        """
        Set the referral status (plus any accompanying field changes)
        """
        return self.update(referral_id, {**changes, 'status': status}, expected_version=expected_version)


class Repository:
    """
    All entity stores of the application, sharing one kind of backend
    """
    def __init__(self, backend_factory: Callable[[str], Any]):
        self.users: EntityStore[User] = EntityStore(User, "User", backend_factory("users"))
        self.donors: EntityStore[Donor] = EntityStore(Donor, "Donor", backend_factory("donors"))
        self.recipients: EntityStore[Recipient] = EntityStore(Recipient, "Recipient", backend_factory("recipients"))
        self.hospitals: EntityStore[Hospital] = EntityStore(Hospital, "Hospital", backend_factory("hospitals"))
        self.referrals = ReferralStore(Referral, "Referral", backend_factory("referrals"))
        self.appointments: EntityStore[Appointment] = EntityStore(Appointment, "Appointment", backend_factory("appointments"))
        self.notifications: EntityStore[Notification] = EntityStore(Notification, "Notification", backend_factory("notifications"))

    @classmethod
    def in_memory(cls) -> "Repository":
        return cls(lambda collection: MemoryBackend())

    @classmethod
    def json_files(cls, data_dir: Union[str, Path], cache_ttl_seconds: float = 60) -> "Repository":
        data_path = Path(data_dir)
        return cls(lambda collection: JsonFileBackend(
            data_path / f"{collection}.json",
            TTLCache(ttl_seconds=cache_ttl_seconds),
        ))

    def is_empty(self) -> bool:
        return not (self.donors.list() or self.recipients.list() or self.hospitals.list())
