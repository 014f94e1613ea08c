from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from config.defaults import DEFAULT_STATE_PATH


class StateError(RuntimeError):
    pass


def resolve_state_path() -> str:
    return os.getenv("DIGMBOT_STATE_PATH", DEFAULT_STATE_PATH)


@dataclass(slots=True)
class PersistentState:
    """State that survives restarts. Mutations must be followed by save()."""

    path: str
    vc_notify_followers: set[int] = field(default_factory=set)
    rivals_ratings: dict[str, int] = field(default_factory=dict)
    rivals_ratings_owners: dict[str, int] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "vc_notify": {"followers": sorted(int(uid) for uid in self.vc_notify_followers)},
            "rivals_ratings": {str(k): int(v) for k, v in sorted(self.rivals_ratings.items())},
            "rivals_ratings_owners": {str(k): int(v) for k, v in sorted(self.rivals_ratings_owners.items())},
        }

    def save(self) -> None:
        """Write to `<path>.new` and rename over the target so readers never see a partial file."""
        target = Path(self.path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = target.with_name(target.name + ".new")
            text = yaml.safe_dump(self.to_payload(), sort_keys=False, allow_unicode=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, target)
        except OSError as exc:
            raise StateError(f"could not save state to {target}: {exc}") from exc


def _int_map(raw: Any, key: str, path: Path) -> dict[str, int]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise StateError(f"`{key}` in {path} must be a mapping")
    out: dict[str, int] = {}
    for name, value in raw.items():
        try:
            out[str(name)] = int(value)
        except (TypeError, ValueError) as exc:
            raise StateError(f"`{key}.{name}` in {path} must be an integer") from exc
    return out


def parse_persistent_state(payload: Any, *, path: str) -> PersistentState:
    p = Path(path)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise StateError(f"state file {p} must contain a top-level mapping")

    vc_notify = payload.get("vc_notify") or {}
    if not isinstance(vc_notify, dict):
        raise StateError(f"`vc_notify` in {p} must be a mapping")
    followers_raw = vc_notify.get("followers") or []
    if not isinstance(followers_raw, list):
        raise StateError(f"`vc_notify.followers` in {p} must be a list")
    try:
        followers = {int(uid) for uid in followers_raw}
    except (TypeError, ValueError) as exc:
        raise StateError(f"`vc_notify.followers` in {p} must contain user IDs") from exc

    return PersistentState(
        path=str(p),
        vc_notify_followers=followers,
        rivals_ratings=_int_map(payload.get("rivals_ratings"), "rivals_ratings", p),
        rivals_ratings_owners=_int_map(payload.get("rivals_ratings_owners"), "rivals_ratings_owners", p),
    )


def load_persistent_state(path: str | Path | None = None) -> PersistentState:
    p = Path(path or resolve_state_path())
    if not p.exists():
        print(f"[State] no state file at {p}; starting empty")
        return PersistentState(path=str(p))

    try:
        payload = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise StateError(f"could not read state at {p}: {exc}") from exc

    return parse_persistent_state(payload, path=str(p))
