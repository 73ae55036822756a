"""
Scanner Registration Package

Assembles point sets reported by independent sensors, each in an unknown local
frame and orientation, into one global point map. Placement uses exact integer
arithmetic over the 24 axis-aligned rotations and a minimum-overlap rule on
translation-invariant fingerprints.
"""

__version__ = "0.1.0"

from .geometry import *
from .registration import *
from .acceleration import *
from .preprocessing import *
from .utils import *

__all__ = [
    "geometry",
    "registration",
    "acceleration",
    "preprocessing",
    "utils",
]
