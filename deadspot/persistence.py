from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from deadspot.config import MiningConfig, get_data_dir
from deadspot.deposit import Deposit
from deadspot.errors import InvalidInput
from deadspot.staking import StakingEngine
from deadspot.state import PlayerState

DEPOSITS_KEY = "cryptoDeposits"
PLAYER_STATE_KEY = "deadspotGame"


class SnapshotStore:
    """Key-value store of JSON snapshots, one file per key."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else get_data_dir()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Any:
        """Return the stored document, or None if missing or unreadable."""
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring corrupted snapshot {path}: {e}")
            return None

    def save(self, key: str, data: Any) -> None:
        os.makedirs(self.directory, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, path)

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()


def load_deposits(store: SnapshotStore) -> list[Deposit]:
    """Load the deposit collection, falling back to empty if malformed."""
    data = store.load(DEPOSITS_KEY)
    try:
        return StakingEngine.parse_snapshot(data)
    except InvalidInput as e:
        logger.warning(f"Discarding malformed deposit snapshot: {e}")
        return []


def save_deposits(store: SnapshotStore, engine: StakingEngine) -> None:
    store.save(DEPOSITS_KEY, engine.snapshot())


def load_player_state(
    store: SnapshotStore, config: MiningConfig | None = None
) -> PlayerState:
    """Load player state, falling back to the initial state if missing or malformed."""
    data = store.load(PLAYER_STATE_KEY)
    if data is None:
        return PlayerState.initial(config)
    try:
        return PlayerState.from_dict(data, config)
    except InvalidInput as e:
        logger.warning(f"Discarding malformed player snapshot: {e}")
        return PlayerState.initial(config)


def save_player_state(store: SnapshotStore, state: PlayerState) -> None:
    store.save(PLAYER_STATE_KEY, state.to_dict())


def clear_player_state(store: SnapshotStore) -> None:
    store.delete(PLAYER_STATE_KEY)
