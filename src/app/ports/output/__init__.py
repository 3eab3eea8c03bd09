from .file_saver import IFileSaver
from .transit_data_provider import ITransitDataProvider

__all__ = [
    "IFileSaver",
    "ITransitDataProvider",
]
