from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from garageengine.events import GameEvent
from garageengine.offline import OfflineProgress

if TYPE_CHECKING:
    from garageengine.runtime import GameRuntime

logger = logging.getLogger(__name__)


def _migrate_v1(state: dict[str, Any]) -> None:
    # v1 predates Nip upgrades, the lifetime Nip total and the job board
    state.setdefault("nip_upgrades", {})
    state.setdefault("total_prestige_earned", state.get("prestige_currency", 0))
    state.setdefault("lifetime_earnings", state.get("total_earned", 0))
    state.setdefault("job_contracts", [])
    state.setdefault("active_job_contract", None)
    state.setdefault("contracts_completed", 0)
    state.setdefault("contracts_failed", 0)


# version -> step that upgrades a state payload to version + 1
MIGRATIONS: dict[int, Callable[[dict[str, Any]], None]] = {
    1: _migrate_v1,
}


class SaveError(Exception):
    """A save envelope is structurally unusable."""


class SaveManager:
    """JSON save file persistence for a runtime.

    The file holds an envelope ``{version, timestamp, state}``; older
    versions are migrated step by step before the state is restored.
    """

    def __init__(self, runtime: GameRuntime, path: str | Path | None = None) -> None:
        self.runtime = runtime
        self.config = runtime.config.save
        self.path = Path(path) if path is not None else Path(self.config.filename)

    @property
    def version(self) -> int:
        return self.config.version

    # ── Save ─────────────────────────────────────────────────────────

    def build_envelope(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.runtime.clock(),
            "state": self.runtime.serialize(),
        }

    def save(self) -> bool:
        envelope = self.build_envelope()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(envelope), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to save game to %s: %s", self.path, exc)
            self.runtime.bus.emit(GameEvent.NOTIFICATION, {"message": "Save failed"})
            return False

        self.runtime.state.last_save_time = envelope["timestamp"]
        logger.info("Game saved to %s", self.path)
        self.runtime.bus.emit(
            GameEvent.GAME_SAVED, {"timestamp": envelope["timestamp"], "path": str(self.path)}
        )
        return True

    def maybe_autosave(self) -> bool:
        """Save if the autosave interval has passed since the last save."""
        elapsed = self.runtime.clock() - self.runtime.state.last_save_time
        if elapsed < self.config.autosave_interval_ms:
            return False
        return self.save()

    # ── Load ─────────────────────────────────────────────────────────

    def migrate(self, envelope: dict[str, Any]) -> dict[str, Any]:
        version = int(envelope.get("version", 1))
        if version > self.version:
            raise SaveError(f"Save version {version} is newer than supported {self.version}")
        while version < self.version:
            step = MIGRATIONS.get(version)
            if step is not None:
                step(envelope["state"])
            logger.info("Migrated save from version %d to %d", version, version + 1)
            version += 1
        envelope["version"] = version
        return envelope

    def _parse(self, text: str) -> dict[str, Any]:
        envelope = json.loads(text)
        if not isinstance(envelope, dict) or not isinstance(envelope.get("state"), dict):
            raise SaveError("Save data is missing its state object")
        return self.migrate(envelope)

    def _load_failed(self, exc: Exception) -> None:
        logger.warning("Failed to load save %s: %s", self.path, exc)
        self.runtime.bus.emit(GameEvent.NOTIFICATION, {"message": "Save load failed"})

    def load(self) -> OfflineProgress | None:
        """Restore the save file. Returns the offline progress granted, or None."""
        if not self.has_save():
            logger.info("No save data found at %s", self.path)
            return None
        try:
            envelope = self._parse(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, KeyError, TypeError, SaveError) as exc:
            self._load_failed(exc)
            return None

        timestamp = float(envelope.get("timestamp", self.runtime.clock()))
        offline = self.runtime.restore(envelope["state"], saved_at=timestamp)
        if offline is None:
            return None

        logger.info("Game loaded from %s", self.path)
        self.runtime.bus.emit(
            GameEvent.GAME_LOADED, {"timestamp": timestamp, "offline_progress": offline}
        )
        return offline

    # ── Import / export ──────────────────────────────────────────────

    def export_save(self) -> str:
        """The save file as a base64 string, or '' if there is none."""
        if not self.has_save():
            return ""
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            logger.warning("Failed to export save: %s", exc)
            return ""
        return base64.b64encode(raw).decode("ascii")

    def import_save(self, encoded: str) -> bool:
        try:
            text = base64.b64decode(encoded, validate=True).decode("utf-8")
            self._parse(text)
        except (binascii.Error, ValueError, KeyError, TypeError, SaveError) as exc:
            self._load_failed(exc)
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            self._load_failed(exc)
            return False
        return self.load() is not None

    def delete_save(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete save: %s", exc)
            return False
        logger.info("Save deleted")
        return True

    def has_save(self) -> bool:
        return self.path.is_file()
