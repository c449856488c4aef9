import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[1]

logger = logging.getLogger(__name__)

# Fixed per-request budget: 20s overall, 15s per navigation, 1 retry
GLOBAL_TIMEOUT_S = 20.0
NAVIGATION_TIMEOUT_MS = 15_000
MAX_ATTEMPTS = 2

DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


@dataclass
class ScrapeConfig:
    """
    Central configuration for the scrape endpoint.

    Values can be overridden via scrape_config.yaml at the project root,
    and the listening port via the PORT environment variable.
    """

    # Request budget
    global_timeout_s: float = GLOBAL_TIMEOUT_S
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS
    max_attempts: int = MAX_ATTEMPTS
    teardown_grace_s: float = 2.0

    # Browser tuning
    browser_headless: bool = True
    browser_args: list[str] = field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    wait_until: str = "networkidle"

    # Server
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.global_timeout_s <= 0 or self.navigation_timeout_ms <= 0:
            raise ValueError("timeouts must be positive")
        if self.teardown_grace_s < 0:
            raise ValueError("teardown_grace_s must not be negative")
        # At least one navigation has to fit before the deadline fires
        if self.navigation_timeout_ms / 1000 >= self.scrape_budget_s:
            raise ValueError(
                f"navigation_timeout_ms ({self.navigation_timeout_ms}) must be shorter "
                f"than global_timeout_s - teardown_grace_s ({self.scrape_budget_s:g}s)"
            )

    @property
    def scrape_budget_s(self) -> float:
        """Time the attempts get; the rest of global_timeout_s is kept for teardown."""
        return self.global_timeout_s - self.teardown_grace_s


def _port_from_env(default: int) -> int:
    raw = os.environ.get("PORT")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("[config] PORT=%r is not an integer, using %s", raw, default)
        return default


def load_scrape_config(path: str | Path | None = None) -> ScrapeConfig:
    """
    Load ScrapeConfig from YAML if present; otherwise use defaults.

    By default, looks for `scrape_config.yaml` at the project root.
    The PORT environment variable always wins over the YAML port.
    """

    if path is None:
        path = PROJECT_ROOT / "scrape_config.yaml"

    path = Path(path)
    data = {}

    if not path.exists():
        logger.info("[config] YAML not found at %s, using defaults", path)
    else:
        raw = path.read_text(encoding="utf-8")
        loaded = yaml.safe_load(raw) or {}
        if isinstance(loaded, dict):
            data = loaded
        else:
            logger.warning("[config] Expected mapping in %s, got %s, using defaults", path, type(loaded))

    allowed_keys = {f.name for f in fields(ScrapeConfig)}
    filtered = {k: v for k, v in data.items() if k in allowed_keys}
    filtered["port"] = _port_from_env(int(filtered.get("port", ScrapeConfig.port)))

    return ScrapeConfig(**filtered)


DEFAULT_SCRAPE_CONFIG = load_scrape_config()
