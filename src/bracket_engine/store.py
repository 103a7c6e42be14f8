"""
Tournament stores.

A store keeps each tournament as one document and hands out a lock per
tournament id. The engine loads a copy, changes it, and saves it back
with the version it loaded; a save against a moved version raises
ConflictError.
"""
import copy
import glob
import hashlib
import logging
import os
import re
import tempfile
import threading
from contextlib import contextmanager
from typing import Dict, List

import yaml
from filelock import FileLock, Timeout

from .errors import ConflictError, DuplicateTournamentError, NotFoundError
from .models import Tournament

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10


def _slugify(name: str) -> str:
    """Convert a tournament id to a filesystem-safe slug."""
    slug = str(name).lower().strip()
    slug = re.sub(r'[^a-z0-9\s_-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


class TournamentStore:
    """Interface shared by the stores below."""

    def lock(self, tournament_id):
        raise NotImplementedError

    def exists(self, tournament_id) -> bool:
        raise NotImplementedError

    def load(self, tournament_id) -> Tournament:
        raise NotImplementedError

    def create(self, tournament: Tournament) -> Tournament:
        raise NotImplementedError

    def save(self, tournament: Tournament, expected_version: int) -> Tournament:
        raise NotImplementedError

    def delete(self, tournament_id):
        raise NotImplementedError

    def list(self) -> List[Tournament]:
        raise NotImplementedError


class MemoryStore(TournamentStore):
    """In-process store; documents are kept as plain dicts."""

    def __init__(self, lock_timeout=DEFAULT_LOCK_TIMEOUT):
        self.lock_timeout = lock_timeout
        self._documents: Dict[str, dict] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    @contextmanager
    def lock(self, tournament_id):
        with self._guard:
            tournament_lock = self._locks.setdefault(str(tournament_id), threading.RLock())
        if not tournament_lock.acquire(timeout=self.lock_timeout):
            logger.warning("Timed out waiting for lock on %s", tournament_id)
            raise ConflictError(f"Tournament {tournament_id} is busy, try again",
                                tournament_id=str(tournament_id))
        try:
            yield
        finally:
            tournament_lock.release()

    def exists(self, tournament_id) -> bool:
        with self._guard:
            return str(tournament_id) in self._documents

    def load(self, tournament_id) -> Tournament:
        with self._guard:
            document = self._documents.get(str(tournament_id))
            if document is None:
                raise NotFoundError(f"Tournament {tournament_id} not found",
                                    tournament_id=str(tournament_id))
            return Tournament.from_dict(copy.deepcopy(document))

    def create(self, tournament: Tournament) -> Tournament:
        with self._guard:
            if tournament.tournament_id in self._documents:
                raise DuplicateTournamentError(f"Tournament {tournament.tournament_id} already exists",
                                               tournament_id=tournament.tournament_id)
            self._documents[tournament.tournament_id] = tournament.to_dict()
        return tournament

    def save(self, tournament: Tournament, expected_version: int) -> Tournament:
        with self._guard:
            current = self._documents.get(tournament.tournament_id)
            if current is None:
                raise NotFoundError(f"Tournament {tournament.tournament_id} not found",
                                    tournament_id=tournament.tournament_id)
            if current['version'] != expected_version:
                logger.warning("Version conflict on %s: expected %s, found %s",
                               tournament.tournament_id, expected_version, current['version'])
                raise ConflictError(f"Tournament {tournament.tournament_id} changed, reload and retry",
                                    expected=expected_version, found=current['version'])
            tournament.version = expected_version + 1
            self._documents[tournament.tournament_id] = tournament.to_dict()
        return tournament

    def delete(self, tournament_id):
        with self._guard:
            if self._documents.pop(str(tournament_id), None) is None:
                raise NotFoundError(f"Tournament {tournament_id} not found",
                                    tournament_id=str(tournament_id))

    def list(self) -> List[Tournament]:
        with self._guard:
            documents = copy.deepcopy(list(self._documents.values()))
        return [Tournament.from_dict(d) for d in documents]


class YamlStore(TournamentStore):
    """One YAML file per tournament in `data_dir`, guarded by a FileLock."""

    def __init__(self, data_dir: str, lock_timeout=DEFAULT_LOCK_TIMEOUT):
        self.data_dir = data_dir
        self.lock_timeout = lock_timeout
        self._file_locks: Dict[str, FileLock] = {}
        self._guard = threading.Lock()
        os.makedirs(data_dir, exist_ok=True)

    def _path(self, tournament_id) -> str:
        # Slugs are lossy; the digest keeps distinct ids in distinct files
        digest = hashlib.sha1(str(tournament_id).encode('utf-8')).hexdigest()[:10]
        return os.path.join(self.data_dir, f"{_slugify(tournament_id)}-{digest}.yaml")

    def _file_lock(self, tournament_id) -> FileLock:
        # One instance per file so the same thread can re-enter its own lock
        lock_path = self._path(tournament_id) + '.lock'
        with self._guard:
            if lock_path not in self._file_locks:
                self._file_locks[lock_path] = FileLock(lock_path, timeout=self.lock_timeout)
            return self._file_locks[lock_path]

    @contextmanager
    def lock(self, tournament_id):
        file_lock = self._file_lock(tournament_id)
        try:
            file_lock.acquire()
        except Timeout:
            logger.warning("Timed out waiting for lock on %s", tournament_id)
            raise ConflictError(f"Tournament {tournament_id} is busy, try again",
                                tournament_id=str(tournament_id))
        try:
            yield
        finally:
            file_lock.release()

    def _read(self, path):
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    def _write(self, path, document):
        # Readers only ever see the old or the new file
        fd, temp_path = tempfile.mkstemp(dir=self.data_dir, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                yaml.dump(document, f, default_flow_style=False, sort_keys=False)
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    def _load_document(self, tournament_id):
        path = self._path(tournament_id)
        if not os.path.exists(path):
            return None
        document = self._read(path)
        if not isinstance(document, dict) or str(document.get('id')) != str(tournament_id):
            return None
        return document

    def exists(self, tournament_id) -> bool:
        return self._load_document(tournament_id) is not None

    def load(self, tournament_id) -> Tournament:
        document = self._load_document(tournament_id)
        if document is None:
            raise NotFoundError(f"Tournament {tournament_id} not found",
                                tournament_id=str(tournament_id))
        return Tournament.from_dict(document)

    def create(self, tournament: Tournament) -> Tournament:
        with self.lock(tournament.tournament_id):
            if self.exists(tournament.tournament_id):
                raise DuplicateTournamentError(f"Tournament {tournament.tournament_id} already exists",
                                               tournament_id=tournament.tournament_id)
            self._write(self._path(tournament.tournament_id), tournament.to_dict())
        return tournament

    def save(self, tournament: Tournament, expected_version: int) -> Tournament:
        with self.lock(tournament.tournament_id):
            current = self._load_document(tournament.tournament_id)
            if current is None:
                raise NotFoundError(f"Tournament {tournament.tournament_id} not found",
                                    tournament_id=tournament.tournament_id)
            if current.get('version', 0) != expected_version:
                logger.warning("Version conflict on %s: expected %s, found %s",
                               tournament.tournament_id, expected_version, current.get('version'))
                raise ConflictError(f"Tournament {tournament.tournament_id} changed, reload and retry",
                                    expected=expected_version, found=current.get('version'))
            tournament.version = expected_version + 1
            self._write(self._path(tournament.tournament_id), tournament.to_dict())
        return tournament

    def delete(self, tournament_id):
        with self.lock(tournament_id):
            if self._load_document(tournament_id) is None:
                raise NotFoundError(f"Tournament {tournament_id} not found",
                                    tournament_id=str(tournament_id))
            os.remove(self._path(tournament_id))

    def list(self) -> List[Tournament]:
        tournaments = []
        for path in sorted(glob.glob(os.path.join(self.data_dir, '*.yaml'))):
            try:
                document = self._read(path)
            except yaml.YAMLError as e:
                logger.warning(f'Failed to parse {path}: {e}')
                continue
            if not isinstance(document, dict) or 'id' not in document or 'format' not in document:
                logger.warning(f'Skipping {path}: not a tournament document')
                continue
            tournaments.append(Tournament.from_dict(document))
        return tournaments
