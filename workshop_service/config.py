from dataclasses import dataclass, field
import os
import re

MIN_SWEATER_SCORE = 1
MAX_SWEATER_SCORE = 10
FALLBACK_SWEATER_SCORE = 10

# optional sign and ASCII digits only; no whitespace, underscores or other digits
_INTEGER = re.compile(r"[+-]?[0-9]+")


def default_sweater_score() -> int:
    """DEFAULT_SWEATER_SCORE if it is an integer in [1, 10], else 10."""
    raw = os.getenv("DEFAULT_SWEATER_SCORE", "")
    if not _INTEGER.fullmatch(raw):
        return FALLBACK_SWEATER_SCORE
    score = int(raw)
    if MIN_SWEATER_SCORE <= score <= MAX_SWEATER_SCORE:
        return score
    return FALLBACK_SWEATER_SCORE


@dataclass
class ServiceConfig:
    host: str = field(default_factory=lambda: os.getenv("WORKSHOP_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("WORKSHOP_PORT", "8080")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    default_sweater_score: int = field(default_factory=default_sweater_score)

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError("WORKSHOP_PORT must be between 1 and 65535")
        if not MIN_SWEATER_SCORE <= self.default_sweater_score <= MAX_SWEATER_SCORE:
            raise ValueError("default_sweater_score must be between 1 and 10")
        self.log_level = self.log_level.upper()
