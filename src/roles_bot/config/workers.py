import os


class Workers:
    def __init__(self, config: dict | None = None) -> None:
        workers_cfg = (config or {}).get("rolesbot", {}).get("workers", {})
        self.CONCURRENCY: int = int(workers_cfg.get("concurrency", os.getenv("WORKER_CONCURRENCY", "16")))
        # Discord refuses more than 20 distinct reactions on one message.
        self.MAX_ROLES_PER_MESSAGE: int = int(
            workers_cfg.get("max_roles_per_message", os.getenv("MAX_ROLES_PER_MESSAGE", "20"))
        )
