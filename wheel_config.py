# =============================================================================
# Prize Wheel Configuration
# Loads the wheel's TOML config and checks it against pydantic models. A
# config that cannot be used as a whole - missing file, syntax error, a field
# of the wrong type, a non-finite number, no segments - is replaced by the
# defaults rather than stopping the overlay.
#
# Example:
#
#   spin_duration_ms = 6000
#   winner_message = "And the winner is...\n{label}!"
#
#   [[segments]]
#   label = "Pizza"
#   weight = 3
#   color = "#e63946"
#
#   [[segments]]
#   label = "Tacos"
#   weight = 1
# =============================================================================

import logging
import tomllib
from typing import Annotated, List, Optional

from pydantic import AllowInfNan, BaseModel, Field, Strict, StrictBool, StrictInt, StrictStr, ValidationError

logger = logging.getLogger(__name__)

# --- DEFAULTS ---
DEFAULT_SPIN_DURATION_MS = 5000.0
DEFAULT_CENTER_COLOR     = "#202020"
DEFAULT_WINNER_MESSAGE   = "Winner:\n{label}"
DEFAULT_WINNER_FONT_SIZE = 40.0
DEFAULT_LABEL_FONT_SIZE  = 20.0
DEFAULT_SEGMENT_COUNT    = 5
MAX_FONT_SIZE            = 512.0

# Used when a config file leaves these out; the built-in defaults differ slightly.
FALLBACK_CENTER_GRAY   = (32, 32, 32)
FALLBACK_CENTER_RATIO  = 0.2
CENTER_RATIO_LIMITS    = (0.0, 0.8)

# Plain numbers only: no bools, no strings, no nan or inf.
FiniteFloat = Annotated[float, Strict(), AllowInfNan(False)]
FontSize    = Annotated[float, Strict(), AllowInfNan(False), Field(le=MAX_FONT_SIZE)]


class SegmentConfig(BaseModel):
    label: StrictStr
    weight: StrictInt = Field(ge=0)
    color: Optional[StrictStr] = None


class AppConfig(BaseModel):
    spin_duration_ms: FiniteFloat = DEFAULT_SPIN_DURATION_MS
    center_color: Optional[StrictStr] = None
    center_radius_ratio: Optional[FiniteFloat] = None
    winner_message: Optional[StrictStr] = None
    winner_font_size: Optional[FontSize] = None
    label_font_size: Optional[FontSize] = None
    show_segments_borders: Optional[StrictBool] = None
    segments: List[SegmentConfig] = Field(min_length=1)

    @classmethod
    def defaults(cls):
        """Five equal, numbered segments and every optional field filled in."""
        return cls(
            spin_duration_ms=DEFAULT_SPIN_DURATION_MS,
            center_color=DEFAULT_CENTER_COLOR,
            center_radius_ratio=0.25,
            winner_message=DEFAULT_WINNER_MESSAGE,
            winner_font_size=DEFAULT_WINNER_FONT_SIZE,
            label_font_size=DEFAULT_LABEL_FONT_SIZE,
            show_segments_borders=True,
            segments=[SegmentConfig(label=str(i), weight=1) for i in range(1, DEFAULT_SEGMENT_COUNT + 1)],
        )

    # --- Resolved values for the renderer ---
    @property
    def radius_ratio(self) -> float:
        ratio = FALLBACK_CENTER_RATIO if self.center_radius_ratio is None else self.center_radius_ratio
        low, high = CENTER_RATIO_LIMITS
        return min(high, max(low, ratio))

    @property
    def winner_template(self) -> str:
        return DEFAULT_WINNER_MESSAGE if self.winner_message is None else self.winner_message

    @property
    def winner_size(self) -> float:
        return DEFAULT_WINNER_FONT_SIZE if self.winner_font_size is None else self.winner_font_size

    @property
    def label_size(self) -> float:
        return DEFAULT_LABEL_FONT_SIZE if self.label_font_size is None else self.label_font_size

    @property
    def borders(self) -> bool:
        return True if self.show_segments_borders is None else self.show_segments_borders


# ========= LOADING =========

def parse_config(data) -> AppConfig:
    """Builds an AppConfig from an already-decoded document, or raises pydantic.ValidationError."""
    return AppConfig.model_validate(data)

def load_config(path=None) -> AppConfig:
    """Reads the TOML config at `path`; no path or any problem with it gives the defaults."""
    if path is None:
        return AppConfig.defaults()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        config = parse_config(data)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError, ValidationError) as e:
        logger.warning("Could not use config '%s' (%s); falling back to defaults.", path, e)
        return AppConfig.defaults()
    logger.info("Loaded %d segments from '%s'", len(config.segments), path)
    return config
