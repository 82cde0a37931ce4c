from __future__ import annotations

import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from loguru import logger

from deadspot.config import MiningConfig, StakingConfig
from deadspot.errors import InvalidInput
from deadspot.persistence import (
    SnapshotStore,
    clear_player_state,
    load_deposits,
    load_player_state,
    save_deposits,
    save_player_state,
)
from deadspot.runtime import MiningRuntime
from deadspot.staking import StakingEngine

_PLAYER_ID = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


@dataclass
class PlayerSession:
    """One player's engines plus the lock guarding them."""

    player_id: str
    mining: MiningRuntime
    staking: StakingEngine
    store: SnapshotStore | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def save(self) -> None:
        if self.store is None:
            return
        save_player_state(self.store, self.mining.state)
        save_deposits(self.store, self.staking)

    def reset_mining(self) -> None:
        """Full game reset, also dropping the stored player snapshot."""
        self.mining.reset_game()
        if self.store is not None:
            clear_player_state(self.store)


class SessionManager:
    """Hands out independently lockable per-player sessions."""

    def __init__(
        self,
        root: str | Path | None = None,
        mining_config: MiningConfig | None = None,
        staking_config: StakingConfig | None = None,
    ) -> None:
        self.root = Path(root) if root is not None else None
        self.mining_config = mining_config or MiningConfig()
        self.staking_config = staking_config or StakingConfig()
        self._sessions: dict[str, PlayerSession] = {}
        self._registry_lock = threading.Lock()

    def get(self, player_id: str) -> PlayerSession:
        """Return the session for *player_id*, loading it on first use."""
        if not isinstance(player_id, str) or not _PLAYER_ID.match(player_id):
            raise InvalidInput(f"Invalid player id: {player_id!r}")
        with self._registry_lock:
            session = self._sessions.get(player_id)
            if session is None:
                session = self._open(player_id)
                self._sessions[player_id] = session
            return session

    @contextmanager
    def locked(self, player_id: str, save: bool = True) -> Iterator[PlayerSession]:
        """Hold *player_id*'s lock for the duration of the block.

        The session is saved on normal exit when *save* is set.
        """
        session = self.get(player_id)
        with session.lock:
            yield session
            if save:
                session.save()

    def player_ids(self) -> list[str]:
        with self._registry_lock:
            return sorted(self._sessions)

    def _open(self, player_id: str) -> PlayerSession:
        store = SnapshotStore(self.root / player_id) if self.root is not None else None
        if store is not None:
            state = load_player_state(store, self.mining_config)
            deposits = load_deposits(store)
        else:
            state, deposits = None, []
        logger.debug(f"Opened session for {player_id}")
        return PlayerSession(
            player_id=player_id,
            mining=MiningRuntime(self.mining_config, state),
            staking=StakingEngine(self.staking_config, deposits),
            store=store,
        )
