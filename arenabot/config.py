"""
Controller tuning.

Every threshold the decision pipeline uses lives here so that one
parameterized arbiter covers what used to be separate hand-tuned variants.
Values can be overridden from the environment:

    ARENABOT_THREAT_RADIUS_SQR=64 ARENABOT_PREDICTION_HORIZON_TICKS=12
"""

import os
import logging

from pydantic import BaseModel, Field

from .defs import DEFAULT_WEAPON_RANK, WeaponType

logger = logging.getLogger('arenabot.config')

ENV_PREFIX = "ARENABOT_"


class ControllerConfig(BaseModel):
    # Threat prediction / evasion
    prediction_horizon_ticks: int = Field(16, ge=1, le=64)
    evasion_max_iterations: int = Field(100, ge=1)
    evasion_step: float = Field(0.5, gt=0)
    threat_radius_sqr: float = Field(49.0, ge=0)

    # Goal arbitration
    low_ammo_threshold: int = Field(1, ge=0)
    platform_nudge: float = 0.3
    seek_health_only_when_damaged: bool = False
    weapon_rank: dict[WeaponType, int] = Field(default_factory=lambda: dict(DEFAULT_WEAPON_RANK))

    # Shooting
    vertical_alignment_tolerance: float = Field(0.5, ge=0)
    raycast_step: float = Field(0.6, gt=0)
    avoid_self_blast: bool = True

    # Command shaping
    aligned_boost: float = Field(0.7, ge=0)
    unaligned_boost: float = Field(0.3, ge=0)
    max_velocity: float = Field(10.0, gt=0)

    # Time budget per tick, only reported
    tick_budget_ms: float = Field(20.0, gt=0)

    def rank(self, weapon_type) -> int:
        if weapon_type is None:
            return 0
        return self.weapon_rank.get(weapon_type, 0)

    @classmethod
    def from_env(cls, prefix=ENV_PREFIX, environ=None):
        """Build a config, taking scalar overrides from environment variables."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for name, info in cls.model_fields.items():
            if info.annotation not in (int, float, bool):
                continue
            raw = environ.get(prefix + name.upper())
            if raw is None:
                continue
            if info.annotation is bool:
                overrides[name] = raw.strip().lower() in ('1', 'true', 'yes', 'on')
            else:
                overrides[name] = raw
            logger.info(f"Config override: {name}={raw}")
        return cls(**overrides)
