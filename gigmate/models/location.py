"""
location.py — The reference point a hotspot query is made against.

LocationQuery is a closed union, in precedence order:

    Precise(lat, lng)   device sensor fix
    Named(city_name)    city from the worker's profile
    DefaultLocation()   hard-coded centroid when neither is known

Instances are frozen and hashable so they can be part of the pipeline's
query key.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Precise:
    lat: float
    lng: float


@dataclass(frozen=True)
class Named:
    city_name: str


@dataclass(frozen=True)
class DefaultLocation:
    pass


LocationQuery = Union[Precise, Named, DefaultLocation]
