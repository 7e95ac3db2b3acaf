"""Environment configuration for the server.

Values come from the process environment, optionally seeded from a .env file
at the repo root:

    HOST              bind address            (default 0.0.0.0)
    PORT              bind port               (default 8080)
    DATA_DIR          node store directory    (default ./data)
    NG_APP_ID         Newgrounds app id; empty disables session verification
    NG_GATEWAY_URL    Newgrounds gateway URL
    PRIVILEGED_USER   username allowed to delete any leaf; empty disables
    SESSION_TIMEOUT   session verification timeout, seconds (default 10)
    LLM_TIMEOUT       LLM proxy timeout, seconds (default 60)
    SEED_DATA         insert the demo story on startup (default 1)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from endless_tale.session import DEFAULT_GATEWAY_URL

ROOT = Path(__file__).parent.parent
load_dotenv(ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    data_dir: Path = ROOT / "data"
    ng_app_id: str = ""
    ng_gateway_url: str = DEFAULT_GATEWAY_URL
    privileged_user: str = ""
    session_timeout: float = 10.0
    llm_timeout: float = 60.0
    seed_data: bool = True


def _flag(value: str) -> bool:
    return value.strip().lower() not in ("", "0", "false", "no", "off")


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    defaults = Settings()
    return Settings(
        host=os.getenv("HOST", defaults.host),
        port=int(os.getenv("PORT", str(defaults.port))),
        data_dir=Path(os.getenv("DATA_DIR", str(defaults.data_dir))),
        ng_app_id=os.getenv("NG_APP_ID", defaults.ng_app_id),
        ng_gateway_url=os.getenv("NG_GATEWAY_URL", defaults.ng_gateway_url),
        privileged_user=os.getenv("PRIVILEGED_USER", defaults.privileged_user),
        session_timeout=float(os.getenv("SESSION_TIMEOUT", str(defaults.session_timeout))),
        llm_timeout=float(os.getenv("LLM_TIMEOUT", str(defaults.llm_timeout))),
        seed_data=_flag(os.getenv("SEED_DATA", "1")),
    )
