from dotenv import load_dotenv
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional
from pathlib import Path
import json
import logging
import os

from shopscan.constants import (
    AGENT_MAX_POLL_SECONDS,
    AGENT_POLL_INTERVAL_SECONDS,
    DEFAULT_ACCEPT_LANGUAGE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)


# Fixed environment variable per provider credential
CREDENTIAL_ENV_VARS = {
    "firecrawl": "FIRECRAWL_API_KEY",
    "exa": "EXA_API_KEY",
    "jina": "JINA_API_KEY",
    "scrapingant": "SCRAPINGANT_API_KEY",
}


@dataclass
class ProviderCredentials:
    """API credentials for the external providers.

    A missing credential means the provider is not configured. The local
    fetch provider needs none.
    """
    firecrawl: Optional[str] = None
    exa: Optional[str] = None
    jina: Optional[str] = None
    scrapingant: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ProviderCredentials":
        """Read credentials from their fixed environment variables.

        Empty strings count as absent.
        """
        values = {}
        for provider, env_var in CREDENTIAL_ENV_VARS.items():
            values[provider] = os.getenv(env_var) or None
        return cls(**values)

    def get(self, provider: str) -> Optional[str]:
        """Return the credential for a provider id, or None."""
        return getattr(self, provider, None) or None


@dataclass
class Config:
    """Runtime configuration for outbound calls and agent polling."""
    timeout: int = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    log_level: str = "INFO"
    poll_interval: float = AGENT_POLL_INTERVAL_SECONDS
    max_poll_time: float = AGENT_MAX_POLL_SECONDS

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment
        """
        return cls(
            timeout=int(os.getenv("SHOPSCAN_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
            user_agent=os.getenv("SHOPSCAN_USER_AGENT", DEFAULT_USER_AGENT),
            accept_language=os.getenv("SHOPSCAN_ACCEPT_LANGUAGE", DEFAULT_ACCEPT_LANGUAGE),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            poll_interval=float(os.getenv("SHOPSCAN_POLL_INTERVAL", str(AGENT_POLL_INTERVAL_SECONDS))),
            max_poll_time=float(os.getenv("SHOPSCAN_MAX_POLL_TIME", str(AGENT_MAX_POLL_SECONDS))),
        )


THRESHOLD_ENV_PREFIX = "SHOPSCAN_THRESHOLD_"

# (lower, upper) threshold pairs that must stay ordered
THRESHOLD_RANGES = (
    ("title_min", "title_max"),
    ("title_optimal_min", "title_optimal_max"),
    ("meta_description_min", "meta_description_max"),
    ("meta_description_optimal_min", "meta_description_optimal_max"),
    ("readability_average_words", "readability_good_words"),
    ("medium_confidence_tier", "high_confidence_tier"),
)


@dataclass
class AnalysisThresholds:
    """Configurable thresholds for the HTML analyzers."""

    # SEO: title and meta description
    title_min: int = 30
    title_max: int = 70
    title_optimal_min: int = 50
    title_optimal_max: int = 60
    meta_description_min: int = 120
    meta_description_max: int = 170
    meta_description_optimal_min: int = 150
    meta_description_optimal_max: int = 160

    # SEO: content
    thin_content_words: int = 300
    readability_good_words: int = 300
    readability_average_words: int = 100

    # SEO: score penalties per issue severity
    critical_penalty: int = 15
    warning_penalty: int = 5
    info_penalty: int = 2

    # Tech stack
    primary_min_confidence: int = 50  # Shop system, PIM, CMS
    secondary_min_confidence: int = 40  # Frontend, analytics, marketing, payment
    high_confidence_tier: int = 80
    medium_confidence_tier: int = 50

    # Procurement
    b2b_portal_min_confidence: int = 50
    b2b_feature_min_confidence: int = 50

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], source: str = "overrides") -> "AnalysisThresholds":
        """Build thresholds from a ``field name -> value`` mapping.

        Unknown names and values that are not non-negative whole numbers are
        skipped with a warning. A min/max pair that ends up inverted is reset
        to its defaults.

        Args:
            values: Overrides keyed by field name
            source: Where the values came from, for log messages
        """
        thresholds = cls()
        known = {f.name for f in fields(cls)}

        for name, value in values.items():
            if name not in known:
                logger.warning(f"Ignoring unknown threshold {name!r} from {source}")
                continue
            number = _as_threshold(value)
            if number is None:
                logger.warning(
                    f"Ignoring threshold {name}={value!r} from {source}: expected a non-negative integer"
                )
                continue
            setattr(thresholds, name, number)

        defaults = cls()
        for low, high in THRESHOLD_RANGES:
            if getattr(thresholds, low) > getattr(thresholds, high):
                logger.warning(f"Threshold {low} exceeds {high} in {source}, using defaults for both")
                setattr(thresholds, low, getattr(defaults, low))
                setattr(thresholds, high, getattr(defaults, high))

        return thresholds

    @classmethod
    def from_env(cls) -> "AnalysisThresholds":
        """Load overrides from ``SHOPSCAN_THRESHOLD_<FIELD>`` variables.

        e.g. SHOPSCAN_THRESHOLD_THIN_CONTENT_WORDS=250
        """
        values = {}
        for f in fields(cls):
            env_value = os.getenv(f"{THRESHOLD_ENV_PREFIX}{f.name.upper()}")
            if env_value is not None:
                values[f.name] = int(env_value) if env_value.strip().isdigit() else env_value
        return cls.from_mapping(values, source="environment")

    @classmethod
    def from_file(cls, path: str) -> "AnalysisThresholds":
        """Load overrides from a JSON file.

        The file is either a flat object of thresholds or an object with a
        ``thresholds`` key holding one. A missing file yields the defaults.

        Raises:
            ValueError: If the file is not valid JSON or not shaped as above
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning(f"Thresholds file {path} not found, using defaults")
            return cls()

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Thresholds file {path} is not valid JSON: {e}")

        section = config.get("thresholds", config) if isinstance(config, dict) else None
        if not isinstance(section, dict):
            raise ValueError(f"Thresholds file {path} must contain a JSON object")

        return cls.from_mapping(section, source=str(path))

    def to_dict(self) -> dict:
        return asdict(self)


def _as_threshold(value: Any) -> Optional[int]:
    """Coerce an override to a non-negative int, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 0:
        return value
    return None


# Global default thresholds instance
default_thresholds = AnalysisThresholds()
