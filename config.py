"""
Production configuration via environment variables.
Load with python-dotenv; no hardcoded paths or secrets.
"""
import os

from dotenv import load_dotenv

from core.mantra import DEFAULT_TEMPLATE, EngineConfig, MantraTemplate, MAHA_MANTRA_ALTERNATES

# Load .env if present (production env is usually set by the orchestrator)
load_dotenv()


def env_flag(name: str, default: bool) -> bool:
    """Boolean env var: 1 / true / yes (any case) is True, anything else False."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


# ----- Server -----
PORT = int(os.environ.get("PORT", "8001"))
HOST = os.environ.get("HOST", "0.0.0.0")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ----- Recognition -----
# Edit distance accepted per word ("krushna" vs "krishna" = 1)
MANTRA_DISTANCE_THRESHOLD = int(os.environ.get("MANTRA_DISTANCE_THRESHOLD", "2"))
# Optional override of the chant itself, space separated
MANTRA_TEXT = os.environ.get("MANTRA_TEXT", "")
# Transcript buffer safety valve: above CAP chars keep only the last KEEP chars
MANTRA_BUFFER_CAP = int(os.environ.get("MANTRA_BUFFER_CAP", "500"))
MANTRA_BUFFER_KEEP = int(os.environ.get("MANTRA_BUFFER_KEEP", "200"))
# Drop the partial transcript when switching between voice and tap mode
CLEAR_BUFFER_ON_MODE_CHANGE = env_flag("CLEAR_BUFFER_ON_MODE_CHANGE", True)

# ----- Persistence -----
CHANT_STATE_PATH = os.environ.get("CHANT_STATE_PATH", "chant_state.json")

# ----- Streaming -----
WS_IDLE_TIMEOUT_SECONDS = float(os.environ.get("WS_IDLE_TIMEOUT_SECONDS", "300"))

# ----- CORS (production: set to specific origins) -----
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")


def get_cors_origins() -> list:
    """Return list of allowed CORS origins from env."""
    if CORS_ORIGINS == "*":
        return ["*"]
    return [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]


def get_template() -> MantraTemplate:
    if not MANTRA_TEXT.strip():
        return DEFAULT_TEMPLATE
    return MantraTemplate.from_text(MANTRA_TEXT, alternates=MAHA_MANTRA_ALTERNATES)


def get_engine_config() -> EngineConfig:
    """EngineConfig from env; invalid values raise ValueError at startup."""
    return EngineConfig(
        template=get_template(),
        distance_threshold=MANTRA_DISTANCE_THRESHOLD,
        buffer_cap=MANTRA_BUFFER_CAP,
        buffer_keep=MANTRA_BUFFER_KEEP,
    )
