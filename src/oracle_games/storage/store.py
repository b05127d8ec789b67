"""
store.py

PURPOSE: Persist and restore game sessions, one JSON file per save slot.
DEPENDENCIES: pydantic, models

ARCHITECTURE NOTES:
Every file holds a SaveRecord envelope:

    {"format_version": 1, "saved_at": "...", "session": {"kind": "questions", ...}}

The session is a discriminated union on `kind`, so one store serves both
games. Writes go to a temp file in the same directory and are swapped in
with os.replace, so a crash mid-write leaves the previous save untouched.
Engines change a session inside `commit`, which saves it and rolls the
session back if the write fails.
Anything that cannot be read back (bad JSON, unknown version, a session
that fails validation) is reported as CorruptSave, never half-loaded.
"""

import contextlib
import json
import logging
import os
import re
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated, TextIO

from pydantic import BaseModel, Field, ValidationError

from oracle_games.errors import CorruptSave, InvalidInput, SaveError, SaveNotFound
from oracle_games.models.adventure import AdventureSession
from oracle_games.models.common import SLOT_PATTERN, utc_now
from oracle_games.models.questions import QuestionsSession
from oracle_games.observability import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

FORMAT_VERSION = 1
SAVE_SUFFIX = ".json"

Session = Annotated[QuestionsSession | AdventureSession, Field(discriminator="kind")]


class SaveRecord(BaseModel):
    """On-disk envelope around a session."""

    format_version: int = FORMAT_VERSION
    saved_at: datetime = Field(default_factory=utc_now)
    session: Session


@dataclass
class SaveSummary:
    """What `list_saves` reports about one slot."""

    slot: str
    kind: str | None
    saved_at: datetime | None
    description: str
    status: str | None = None
    finished: bool = False
    error: str | None = None

    @property
    def resumable(self) -> bool:
        """A readable save of a game that is still in progress."""
        return self.error is None and not self.finished


@contextlib.contextmanager
def atomic_write(path: Path) -> Iterator[TextIO]:
    """
    Open a temp file next to `path` and move it into place on success.

    The temp file is flushed and fsynced before the rename. If the body
    raises, the temp file is removed and `path` is left as it was.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


@contextlib.contextmanager
def commit(
    session: QuestionsSession | AdventureSession, store: "SessionStore | None"
) -> Iterator[None]:
    """
    Apply the body's changes to `session`, then save it.

    If the body or the save raises, every field of `session` is put back
    as it was on entry, so the in-memory game never runs ahead of the
    file on disk. The object itself is kept, so callers holding a
    reference see the restored state.
    """
    snapshot = session.model_copy(deep=True)
    try:
        yield
        if store is not None:
            store.save(session)
    except Exception:
        for name in type(session).model_fields:
            setattr(session, name, getattr(snapshot, name))
        raise


def _describe(session: QuestionsSession | AdventureSession) -> str:
    if isinstance(session, QuestionsSession):
        return (
            f"20 Questions ({session.category.value}), "
            f"{session.questions_asked}/{session.max_questions} asked, {session.status.value}"
        )
    character = session.character
    campaign = session.campaign or "untitled campaign"
    return f"{character.describe()} in {campaign}"


class SessionStore:
    """
    Save slots in a directory.

    Access to a slot is assumed exclusive; there is no locking.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, slot: str) -> Path:
        if not re.fullmatch(SLOT_PATTERN, slot):
            raise InvalidInput(
                f"Invalid save slot name '{slot}': use letters, digits, '-' and '_'"
            )
        return self.directory / f"{slot}{SAVE_SUFFIX}"

    def exists(self, slot: str) -> bool:
        return self.path_for(slot).is_file()

    def save(self, session: QuestionsSession | AdventureSession) -> Path:
        """
        Write the session to its slot, replacing any previous save atomically.

        Raises:
            SaveError: If the file cannot be written
        """
        path = self.path_for(session.slot)
        record = SaveRecord(session=session)

        with tracer.start_as_current_span("store.save") as span:
            span.set_attribute("store.slot", session.slot)
            span.set_attribute("store.kind", session.kind)
            try:
                with atomic_write(path) as handle:
                    handle.write(record.model_dump_json(indent=2))
            except OSError as e:
                span.record_exception(e)
                raise SaveError(f"Could not write save slot '{session.slot}': {e}") from e

        logger.debug(f"Saved {session.kind} session {session.id} to {path}")
        return path

    def load(self, slot: str) -> QuestionsSession | AdventureSession:
        """
        Read the session stored in a slot.

        Raises:
            SaveNotFound: If the slot is empty
            CorruptSave: If the file cannot be parsed or validated
        """
        path = self.path_for(slot)

        with tracer.start_as_current_span("store.load") as span:
            span.set_attribute("store.slot", slot)
            try:
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                raise SaveNotFound(slot) from None
            except OSError as e:
                raise SaveError(f"Could not read save slot '{slot}': {e}") from e

            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                span.record_exception(e)
                raise CorruptSave(slot, f"invalid JSON at line {e.lineno}") from e

            if not isinstance(data, dict):
                raise CorruptSave(slot, "expected a JSON object")
            version = data.get("format_version")
            if version != FORMAT_VERSION:
                raise CorruptSave(slot, f"unsupported format version {version!r}")

            try:
                record = SaveRecord.model_validate(data)
            except ValidationError as e:
                span.record_exception(e)
                raise CorruptSave(slot, f"{e.error_count()} validation error(s)") from e

        session = record.session
        if session.slot != slot:
            logger.info(f"Save file for slot '{slot}' named slot '{session.slot}'; using '{slot}'")
            session.slot = slot
        return session

    def delete(self, slot: str) -> None:
        """
        Remove a save slot.

        Raises:
            SaveNotFound: If the slot is empty
        """
        try:
            self.path_for(slot).unlink()
        except FileNotFoundError:
            raise SaveNotFound(slot) from None
        logger.info(f"Deleted save slot '{slot}'")

    def list_saves(self) -> list[SaveSummary]:
        """Summaries of every slot, most recently saved first. Unreadable slots sort last."""
        summaries: list[SaveSummary] = []
        for path in sorted(self.directory.glob(f"*{SAVE_SUFFIX}")):
            slot = path.name[: -len(SAVE_SUFFIX)]
            try:
                session = self.load(slot)
            except (SaveError, InvalidInput) as e:
                summaries.append(
                    SaveSummary(slot=slot, kind=None, saved_at=None, description="", error=str(e))
                )
                continue
            summaries.append(
                SaveSummary(
                    slot=slot,
                    kind=session.kind,
                    saved_at=session.updated_at,
                    description=_describe(session),
                    status=session.status.value,
                    finished=session.is_terminal,
                )
            )

        summaries.sort(
            key=lambda s: s.saved_at.timestamp() if s.saved_at else float("-inf"),
            reverse=True,
        )
        return summaries
