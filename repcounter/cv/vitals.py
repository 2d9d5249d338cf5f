"""Vital-sign thresholds that pause exercise tracking."""

from dataclasses import dataclass, field
from typing import List, Optional

from repcounter.config import Settings, get_settings


@dataclass
class VitalSigns:
    """Latest readings from the wearable. None means no reading."""
    heart_rate: Optional[int] = None       # bpm
    spo2: Optional[int] = None             # percent
    breathing_rate: Optional[int] = None   # breaths / minute


@dataclass
class VitalsCheck:
    should_pause: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return "\n\n".join(self.warnings)


def check_vitals(vitals: VitalSigns, settings: Optional[Settings] = None) -> VitalsCheck:
    """Compare readings against the configured safe ranges."""
    settings = settings or get_settings()
    result = VitalsCheck()

    def warn(text: str):
        result.warnings.append(f"WARNING! {text} Please take a rest!")
        result.should_pause = True

    if vitals.heart_rate is not None:
        if vitals.heart_rate < settings.min_heart_rate:
            warn(f"Heart rate too low! ({vitals.heart_rate} bpm)")
        elif vitals.heart_rate > settings.max_heart_rate:
            warn(f"Heart rate too high! ({vitals.heart_rate} bpm)")

    if vitals.spo2 is not None and vitals.spo2 < settings.min_spo2:
        warn(f"SpO2 too low! ({vitals.spo2}%)")

    if vitals.breathing_rate is not None:
        if vitals.breathing_rate < settings.min_breathing_rate:
            warn(f"Breathing rate too low! ({vitals.breathing_rate}/min)")
        elif vitals.breathing_rate > settings.max_breathing_rate:
            warn(f"Breathing rate too high! ({vitals.breathing_rate}/min)")

    return result
