"""
Configuration management for the lexicographic POMDP planner.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


class Config:
    """Application configuration settings."""

    # Base paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    RUNS_DIR: Path = Path(os.getenv("RUNS_DIR", str(PROJECT_ROOT / "runs")))

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Solver settings
    DEFAULT_RANDOM_SEED: int = int(os.getenv("RANDOM_SEED", "42"))
    LPBVI_EPSILON: float = float(os.getenv("LPBVI_EPSILON", "0.01"))
    LPBVI_EXPANSIONS: int = int(os.getenv("LPBVI_EXPANSIONS", "1"))
    LPBVI_EXPANSION_RULE: str = os.getenv("LPBVI_EXPANSION_RULE", "none")

    @classmethod
    def ensure_directories(cls) -> None:
        """Ensure all output directories exist."""
        cls.RUNS_DIR.mkdir(parents=True, exist_ok=True)
