import os
from pathlib import Path

_DEFAULT_DB_PATH = Path("data") / "roles.db"

_SYNC_MODES = ("OFF", "NORMAL", "FULL", "EXTRA")


class Store:
    def __init__(self, config: dict | None = None) -> None:
        store_cfg = (config or {}).get("rolesbot", {}).get("store", {})
        self.DB_PATH: str = str(store_cfg.get("db_path", os.getenv("ROLES_DB_PATH", str(_DEFAULT_DB_PATH))))
        synchronous = str(store_cfg.get("synchronous", os.getenv("ROLES_DB_SYNCHRONOUS", "FULL"))).upper()
        if synchronous not in _SYNC_MODES:
            raise ValueError(f"ROLES_DB_SYNCHRONOUS must be one of {', '.join(_SYNC_MODES)}")
        self.SYNCHRONOUS: str = synchronous
        # Seconds between sweeps for bindings on deleted messages; 0 disables.
        self.VALIDATE_INTERVAL: float = float(
            store_cfg.get("validate_interval", os.getenv("ROLES_VALIDATE_INTERVAL", "21600"))
        )
