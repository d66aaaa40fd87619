"""
Configuration for the deskew tool.

Every tunable constant of the pipeline lives here, grouped by stage.
A TOML file with the same section names can override any of them:

    [preprocess]
    max_height = 1200
    threshold = 60

    [estimate]
    trim_fraction = 0.05

Sections and keys that are left out keep their defaults.
"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Try to import tomllib (Python 3.11+) or fallback to tomli
try:
    import tomllib
except ImportError:
    import tomli as tomllib

from .exceptions import ConfigurationError

PathLike = Union[str, Path]


def _require(condition: bool, message: str, **details: Any) -> None:
    if not condition:
        raise ConfigurationError(message, details)


@dataclass(frozen=True)
class PreprocessConfig:
    """Resize and binarization settings."""

    # Working height in pixels; taller images are scaled down to it
    max_height: int = 1200
    # Inverted intensity must be strictly above this (0-255) to count as ink
    threshold: int = 60

    def __post_init__(self):
        _require(self.max_height > 0, "max_height must be positive", max_height=self.max_height)
        _require(
            0 <= self.threshold <= 255,
            "threshold must be within 0-255",
            threshold=self.threshold,
        )


@dataclass(frozen=True)
class DetectConfig:
    """Probabilistic Hough transform parameters."""

    rho: float = 1.0
    theta_degrees: float = 1.0
    votes: int = 100
    # Minimum segment length is the original image width divided by this
    min_length_divisor: float = 50.0
    # Largest gap (working-resolution pixels) bridged when merging segments
    max_gap: int = 20

    def __post_init__(self):
        _require(self.rho > 0, "rho must be positive", rho=self.rho)
        _require(self.theta_degrees > 0, "theta_degrees must be positive", theta_degrees=self.theta_degrees)
        _require(self.votes > 0, "votes must be positive", votes=self.votes)
        _require(
            self.min_length_divisor > 0,
            "min_length_divisor must be positive",
            min_length_divisor=self.min_length_divisor,
        )
        _require(self.max_gap >= 0, "max_gap must not be negative", max_gap=self.max_gap)


@dataclass(frozen=True)
class EstimateConfig:
    """Skew estimation heuristic settings."""

    # Segments within (-angle_window, +angle_window) degrees are candidates
    angle_window: float = 15.0
    # Fraction of sorted candidates dropped from each end before averaging
    trim_fraction: float = 0.05
    # Below this candidates/total ratio the estimate is forced to zero
    min_good_ratio: float = 0.75
    # Fold segment angles into (-90, 90] degrees before classification
    fold_direction: bool = False

    def __post_init__(self):
        _require(
            0 < self.angle_window <= 90,
            "angle_window must be within (0, 90]",
            angle_window=self.angle_window,
        )
        _require(
            0 <= self.trim_fraction <= 0.5,
            "trim_fraction must be within [0, 0.5]",
            trim_fraction=self.trim_fraction,
        )
        _require(
            0 <= self.min_good_ratio <= 1,
            "min_good_ratio must be within [0, 1]",
            min_good_ratio=self.min_good_ratio,
        )


@dataclass(frozen=True)
class CorrectConfig:
    """Rotation settings."""

    # Rotations smaller than this many degrees are skipped
    min_angle: float = 0.0

    def __post_init__(self):
        _require(self.min_angle >= 0, "min_angle must not be negative", min_angle=self.min_angle)


@dataclass(frozen=True)
class DebugConfig:
    """Logging and intermediate output settings."""

    log_target: str = "stdout"
    log_file: str = "deskew.log"
    save_intermediate: bool = False
    snapshot_dir: str = "deskew-debug"

    def __post_init__(self):
        _require(
            self.log_target in ("stdout", "file"),
            "log_target must be 'stdout' or 'file'",
            log_target=self.log_target,
        )


@dataclass(frozen=True)
class DeskewConfig:
    """Complete configuration, one section per pipeline stage."""

    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)
    detect: DetectConfig = field(default_factory=DetectConfig)
    estimate: EstimateConfig = field(default_factory=EstimateConfig)
    correct: CorrectConfig = field(default_factory=CorrectConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeskewConfig":
        """Build a configuration from a nested mapping such as parsed TOML."""
        sections = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(
                "Unknown configuration section", {"sections": ", ".join(sorted(unknown))}
            )

        kwargs = {}
        for name, section_field in sections.items():
            values = data.get(name, {})
            if not isinstance(values, dict):
                raise ConfigurationError(f"Section [{name}] must be a table")
            section_cls = section_field.default_factory
            known = {f.name for f in fields(section_cls)}
            extra = set(values) - known
            if extra:
                raise ConfigurationError(
                    f"Unknown keys in [{name}]", {"keys": ", ".join(sorted(extra))}
                )
            try:
                kwargs[name] = section_cls(**values)
            except TypeError as e:
                raise ConfigurationError(f"Invalid values in [{name}]: {e}") from e
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_path: Optional[PathLike] = None) -> DeskewConfig:
    """
    Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML file, or None for the defaults

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file is missing, not valid TOML, or holds
            unknown keys or out-of-range values
    """
    if config_path is None:
        return DeskewConfig()

    # Ensure it's a Path object
    if not isinstance(config_path, Path):
        config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError("Config file not found", {"path": str(config_path)})

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Error loading config: {e}", {"path": str(config_path)}) from e

    return DeskewConfig.from_dict(data)
