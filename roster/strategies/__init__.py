"""People extraction strategies, one per source-format era."""

from roster.strategies.base import PeopleStrategy
from roster.strategies.legacy import Parl1stTo35thStrategy
from roster.strategies.modern import Parl36thToDateStrategy

__all__ = [
    "Parl1stTo35thStrategy",
    "Parl36thToDateStrategy",
    "PeopleStrategy",
]
