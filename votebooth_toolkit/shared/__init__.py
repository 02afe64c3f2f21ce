from votebooth_toolkit.shared.config import BoothConfig
from votebooth_toolkit.shared.constants import BoothConstants

__all__ = ["BoothConfig", "BoothConstants"]
