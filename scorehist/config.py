"""Configuration models using Pydantic v2.

Groups the settings a histogram run needs (the bin grid, how goodness of fit
is evaluated, and logging) into one validated object that can be loaded
from and saved to YAML.

Examples:
    Defaults::

        config = Config()
        hist = config.create_histogram()

    From a YAML file::

        config = Config.from_yaml(Path("histogram.yaml"))
        config.setup_logging()

    A matching YAML file::

        histogram:
          bmin: -10.0
          bmax: 40.0
          w: 0.5
          full: true
        goodness:
          nfitted: 2
          use_bindata: true
        logging:
          level: DEBUG
"""

import logging
from pathlib import Path
import sys
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator
import yaml

from .goodness import GoodnessOfFitResult
from .histogram import Histogram


class HistogramConfig(BaseModel):
    """Initial bin grid and storage mode.

    The grid bounds are only a first guess; the grid grows as samples
    outside it arrive.
    """

    bmin: float = Field(default=0.0, description="Initial lower bound of the grid")
    bmax: float = Field(default=100.0, description="Initial upper bound of the grid")
    w: float = Field(default=1.0, gt=0, description="Bin width")
    full: bool = Field(default=False, description="Keep every raw sample as well as bin counts")

    @model_validator(mode="after")
    def validate_bounds(self):
        """Ensure the grid spans a positive range.

        Returns:
            Validated config.

        Raises:
            ValueError: If bmin is not below bmax.
        """
        if self.bmin >= self.bmax:
            raise ValueError(f"bmin ({self.bmin}) must be below bmax ({self.bmax})")
        return self


class GoodnessConfig(BaseModel):
    """How goodness of fit is evaluated."""

    nfitted: int = Field(default=0, ge=0, description="Parameters fitted to the data")
    use_bindata: bool = Field(
        default=True, description="Compare bin counts (True) or raw-sample groups (False)"
    )


class LoggingConfig(BaseModel):
    """Logging configuration.

    Controls logging behavior including level, output destinations,
    and message formatting.
    """

    enabled: bool = Field(default=True, description="Enable logging")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (None=no file logging)"
    )
    console_output: bool = Field(default=True, description="Log to console")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )


class Config(BaseModel):
    """Complete configuration for building and evaluating a histogram."""

    histogram: HistogramConfig = Field(default_factory=HistogramConfig)
    goodness: GoodnessConfig = Field(default_factory=GoodnessConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML file.

        Returns:
            Validated configuration; an empty file gives all defaults.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValidationError: If the contents are invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data: Optional[Dict[str, Any]] = yaml.safe_load(f)
        return cls(**(data or {}))

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Destination path; parent directories are created.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def setup_logging(self) -> None:
        """Configure the ``scorehist`` logger from the logging settings."""
        if not self.logging.enabled:
            return

        logger = logging.getLogger("scorehist")
        logger.setLevel(getattr(logging, self.logging.level))
        logger.handlers.clear()

        formatter = logging.Formatter(self.logging.format)

        if self.logging.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if self.logging.log_file:
            log_path = Path(self.logging.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    def create_histogram(self) -> Histogram:
        """Create an empty histogram with the configured grid and storage mode."""
        h = self.histogram
        return Histogram(h.bmin, h.bmax, h.w, full=h.full)

    def evaluate(
        self, hist: Histogram, distribution: Any, params: Any = None
    ) -> GoodnessOfFitResult:
        """Run goodness of fit on ``hist`` with the configured options."""
        return hist.goodness(
            distribution,
            nfitted=self.goodness.nfitted,
            use_bindata=self.goodness.use_bindata,
            params=params,
        )
