from .mta_bus_adapter import MtaBusAdapter
from .mta_subway_adapter import MtaSubwayAdapter
from .njt_bus_adapter import NjtBusAdapter
from .njt_rail_adapter import NjtRailAdapter
from .path_adapter import PathAdapter

__all__ = [
    "MtaBusAdapter",
    "MtaSubwayAdapter",
    "NjtBusAdapter",
    "NjtRailAdapter",
    "PathAdapter",
]
