from .geo import GeoPoint
from .gpx import GPX_MIME_TYPE, GpxDocument
from .transit import Pattern, Route, Shape

__all__ = [
    "GeoPoint",
    "GPX_MIME_TYPE",
    "GpxDocument",
    "Pattern",
    "Route",
    "Shape",
]
