from .magnet import MagnetSupply
from .ips import OxfordIPS

__all__ = ["MagnetSupply", "OxfordIPS"]
