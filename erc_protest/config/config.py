"""Configuration module for the ERC protest pipeline."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_EXAMPLE_LETTER_PATH = Path(__file__).resolve().parent.parent / "templates" / "example_letter.txt"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _get_required_env(name: str) -> str:
    """Get required environment variable or raise error."""
    value = os.getenv(name)
    if value is None or value == "":
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def _get_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be a number, got {value!r}") from exc


def get_openai_api_key() -> str:
    """Get OpenAI API key from environment variables."""
    return _get_required_env("OPENAI_API_KEY")


def get_openai_model_name() -> str:
    """Get OpenAI model name from environment variables, with safe default."""
    return os.getenv("OPENAI_MODEL_NAME", "gpt-4o-mini")


def get_openai_timeout_seconds() -> float:
    return _get_float_env("OPENAI_TIMEOUT_SECONDS", 120.0)


def get_s3_bucket() -> Optional[str]:
    """S3 bucket for published artifacts; None disables publishing."""
    return os.getenv("ERC_S3_BUCKET") or None


def get_aws_region() -> str:
    return os.getenv("AWS_REGION", "us-east-1")


def get_tracking_webhook_url() -> Optional[str]:
    """Tracking-store webhook URL; None disables status reporting."""
    return os.getenv("ERC_TRACKING_WEBHOOK_URL") or None


@dataclass(frozen=True)
class PipelineSettings:
    """Settings shared by every stage of one pipeline run."""
    output_dir: Path
    example_letter_path: Path
    compose_mode: str = "transcript"
    sanitize_first: bool = False
    fail_on_empty_transcript: bool = False
    deadline_seconds: Optional[float] = 900.0
    settle_seconds: float = 5.0
    attachment_settle_seconds: float = 2.0
    headless: bool = True
    s3_prefix: str = "erc-protests"
    s3_link_expires_seconds: int = 7 * 24 * 3600


def load_pipeline_settings() -> PipelineSettings:
    """Build pipeline settings from environment variables."""
    compose_mode = os.getenv("ERC_COMPOSE_MODE", "transcript").strip().lower()
    if compose_mode not in ("transcript", "facts"):
        raise RuntimeError(f"ERC_COMPOSE_MODE must be 'transcript' or 'facts', got {compose_mode!r}")

    deadline = _get_float_env("ERC_PIPELINE_DEADLINE_SECONDS", 900.0)

    return PipelineSettings(
        output_dir=Path(os.getenv("ERC_OUTPUT_DIR", "./data/erc_packages")),
        example_letter_path=Path(os.getenv("ERC_EXAMPLE_LETTER_PATH", str(DEFAULT_EXAMPLE_LETTER_PATH))),
        compose_mode=compose_mode,
        sanitize_first=_get_bool_env("ERC_SANITIZE_FIRST", False),
        fail_on_empty_transcript=_get_bool_env("ERC_FAIL_ON_EMPTY_TRANSCRIPT", False),
        deadline_seconds=deadline if deadline > 0 else None,
        settle_seconds=_get_float_env("ERC_SETTLE_SECONDS", 5.0),
        attachment_settle_seconds=_get_float_env("ERC_ATTACHMENT_SETTLE_SECONDS", 2.0),
        headless=_get_bool_env("BROWSER_HEADLESS", True),
        s3_prefix=os.getenv("ERC_S3_PREFIX", "erc-protests"),
        s3_link_expires_seconds=int(_get_float_env("ERC_S3_LINK_EXPIRES_SECONDS", 7 * 24 * 3600)),
    )
