"""Durable single-slot storage for the active workout session.

The slot is a pair of mirrored JSON recovery files so a crash while writing
one of them still leaves a readable copy. A third file holds the "minimized"
visibility flag, which only has meaning while a session record exists.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from . import DEFAULT_RECOVERY_BASE
from .errors import PersistenceUnavailable
from .models import Session


class SessionStore:
    """Own the recovery files for the single active session."""

    def __init__(self, base: Path = DEFAULT_RECOVERY_BASE) -> None:
        self.base = Path(base)
        self.primary = self.base.with_name(self.base.name + "_1.json")
        self.backup = self.base.with_name(self.base.name + "_2.json")
        self.flag_path = self.base.with_name(self.base.name + "_minimized.json")

    @property
    def slot_paths(self) -> tuple[Path, Path]:
        return (self.primary, self.backup)

    def init(self) -> None:
        """Make sure the directory holding the recovery files exists."""

        try:
            self.base.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceUnavailable(str(exc)) from exc

    def save(self, session: Session) -> None:
        """Write ``session`` to both recovery files."""

        payload = json.dumps(session.to_dict())
        self.init()
        try:
            for path in self.slot_paths:
                path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise PersistenceUnavailable(str(exc)) from exc

    def load(self) -> Session | None:
        """Return the persisted session, or ``None`` if there is none.

        Unreadable or corrupt files are skipped; the backup copy is used when
        the primary one cannot be parsed.
        """

        for path in self.slot_paths:
            try:
                if not path.exists():
                    continue
                text = path.read_text(encoding="utf-8").strip()
                if not text:
                    continue
                return Session.from_dict(json.loads(text))
            except (OSError, ValueError, KeyError, TypeError):
                logging.warning("Ignoring unreadable recovery file %s", path)
                continue
        return None

    def has_session(self) -> bool:
        return self.load() is not None

    def clear(self) -> None:
        """Remove the session record and the visibility flag.

        Every file is attempted; :class:`PersistenceUnavailable` is raised
        afterwards if any of them could not be removed.
        """

        failed = []
        for path in (*self.slot_paths, self.flag_path):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                failed.append(f"{path}: {exc}")
        if failed:
            raise PersistenceUnavailable(
                "Could not remove recovery files: " + "; ".join(failed)
            )

    def set_minimized(self, minimized: bool) -> None:
        self.init()
        try:
            self.flag_path.write_text(json.dumps(bool(minimized)), encoding="utf-8")
        except OSError as exc:
            raise PersistenceUnavailable(str(exc)) from exc

    def is_minimized(self) -> bool:
        """Return the stored flag; always ``False`` without a session."""

        if not self.has_session():
            return False
        try:
            return json.loads(self.flag_path.read_text(encoding="utf-8")) is True
        except (OSError, ValueError):
            return False
