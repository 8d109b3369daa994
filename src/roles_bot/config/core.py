import os


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("rolesbot", {})
        discord_cfg = cfg.get("discord", {})
        limits_cfg = cfg.get("limits", {})

        token_env = str(discord_cfg.get("token_env", "DISCORD_API_TOKEN"))
        self.DISCORD_API_TOKEN: str | None = os.getenv(token_env)

        self.TRIGGER: str = str(discord_cfg.get("trigger", os.getenv("ROLES_TRIGGER", "@roles"))).strip()
        self.MAX_AUTO_ROLES: int = int(limits_cfg.get("max_auto_roles", os.getenv("MAX_AUTO_ROLES", "25")))

        required = [
            ("DISCORD_API_TOKEN", self.DISCORD_API_TOKEN),
            ("ROLES_TRIGGER", self.TRIGGER),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
