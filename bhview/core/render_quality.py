"""Ray-march quality presets handed to the shading collaborator."""
from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderQuality:
    """Integration step length and step count for the ray marcher."""
    name: str
    step: float
    num_steps: int

    def shader_defines(self) -> str:
        """Return the GLSL #define prelude for this preset."""
        return f"#define STEP {self.step}\n#define NSTEPS {self.num_steps}\n"


QUALITY_PRESETS: dict[str, RenderQuality] = {
    "low": RenderQuality("low", step=0.1, num_steps=300),
    "medium": RenderQuality("medium", step=0.05, num_steps=600),
    "high": RenderQuality("high", step=0.02, num_steps=1000),
}

DEFAULT_QUALITY = "medium"


def get_quality(name: str) -> RenderQuality:
    """Look up a preset by name; unknown names fall back to medium."""
    preset = QUALITY_PRESETS.get(str(name).strip().lower())
    if preset is None:
        logger.warning(f"Unknown render quality: {name!r}, using {DEFAULT_QUALITY}")
        return QUALITY_PRESETS[DEFAULT_QUALITY]
    return preset
