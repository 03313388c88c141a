"""Positions and envelopes."""

from crs_transform.geometry.direct_position import DirectPosition2D, GeneralDirectPosition
from crs_transform.geometry.envelope import Envelope2D, GeneralEnvelope

__all__ = [
    "GeneralDirectPosition",
    "DirectPosition2D",
    "GeneralEnvelope",
    "Envelope2D",
]
