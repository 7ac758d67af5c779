"""Runtime configuration. Defaults live here; a .env file or the environment can override them."""

import os
from dataclasses import dataclass, field

from wandermap.models import ProjectionParams

DEFAULT_TOPOLOGY_URL = "https://unpkg.com/world-atlas@2/countries-110m.json"
DEFAULT_TOPOLOGY_OBJECT = "countries"
ANTARCTICA_ID = "010"
TOTAL_COUNTRIES = 193  # UN member states, shown as the statistics denominator


@dataclass(frozen=True)
class MapConfig:
    """Settings for one map session."""

    topology_url: str = DEFAULT_TOPOLOGY_URL
    topology_object: str = DEFAULT_TOPOLOGY_OBJECT
    excluded_ids: frozenset[str] = frozenset({ANTARCTICA_ID})
    projection: ProjectionParams = field(default_factory=ProjectionParams)
    margin: float = 0.9  # Share of the viewport the fitted map may occupy
    timeout_s: float = 10.0
    default_color: str = "#2196F3"

    @classmethod
    def from_env(cls) -> "MapConfig":
        """Build a config from WANDERMAP_* environment variables.

        Unset variables keep their defaults. Call ``load_dotenv()`` first to
        pick up a ``.env`` file.

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        defaults = cls()
        excluded_raw = os.environ.get("WANDERMAP_EXCLUDED_IDS")
        if excluded_raw is None:
            excluded = defaults.excluded_ids
        else:
            excluded = frozenset(p.strip() for p in excluded_raw.split(",") if p.strip())
        return cls(
            topology_url=os.environ.get("WANDERMAP_TOPOLOGY_URL", defaults.topology_url),
            topology_object=os.environ.get(
                "WANDERMAP_TOPOLOGY_OBJECT", defaults.topology_object
            ),
            excluded_ids=excluded,
            margin=float(os.environ.get("WANDERMAP_MARGIN", defaults.margin)),
            timeout_s=float(os.environ.get("WANDERMAP_TIMEOUT", defaults.timeout_s)),
            default_color=os.environ.get(
                "WANDERMAP_DEFAULT_COLOR", defaults.default_color
            ),
        )
