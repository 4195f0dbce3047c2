"""
SpatialSummarizer: centroid and convex-hull area of the exported sites.

Geometry is delegated to shapely; the area is measured after projecting the
hull with pyproj onto a Lambert azimuthal equal-area projection centred on
the hull's centroid.
"""

from pyproj import CRS, Transformer
from shapely.geometry import MultiPoint, Polygon
from shapely.ops import transform

from survey_curation.core.errors import GeometryError
from survey_curation.core.models import CanonicalRecord, SpatialSummary

WGS84 = CRS.from_epsg(4326)


def distinct_coordinates(records: list[CanonicalRecord]) -> list[tuple[float, float]]:
    """Distinct (latitude, longitude) pairs in first-appearance order."""
    seen: dict[tuple[float, float], None] = {}
    for record in records:
        if record.latitude is None or record.longitude is None:
            continue
        seen.setdefault((record.latitude, record.longitude), None)
    return list(seen)


def equal_area_crs(latitude: float, longitude: float) -> CRS:
    """Lambert azimuthal equal-area projection centred on a point."""
    return CRS.from_proj4(
        f"+proj=laea +lat_0={latitude} +lon_0={longitude} +x_0=0 +y_0=0 +datum=WGS84 +units=m +no_defs"
    )


class SpatialSummarizer:
    """Computes the spatial summary of a set of coordinates."""

    def summarize(self, coordinates: list[tuple[float, float]]) -> SpatialSummary:
        """
        Args:
            coordinates: Distinct (latitude, longitude) pairs

        Returns:
            SpatialSummary with centroid and area in square kilometres

        Raises:
            GeometryError: No coordinates, collinear points, or a point set
                spanning the antimeridian
        """
        points = list(dict.fromkeys(coordinates))
        if not points:
            raise GeometryError("no coordinates to summarize")

        if len(points) == 1:
            latitude, longitude = points[0]
            return SpatialSummary(central_latitude=latitude, central_longitude=longitude, area_sq_km=0.0)

        longitudes = [longitude for _, longitude in points]
        if max(longitudes) - min(longitudes) > 180.0:
            raise GeometryError("coordinate set spans more than 180 degrees of longitude (antimeridian crossing)")

        hull = MultiPoint([(longitude, latitude) for latitude, longitude in points]).convex_hull
        if not isinstance(hull, Polygon) or hull.area == 0:
            raise GeometryError(f"{len(points)} points are collinear; convex hull is a {hull.geom_type}")

        centroid = hull.centroid
        to_equal_area = Transformer.from_crs(WGS84, equal_area_crs(centroid.y, centroid.x), always_xy=True)
        projected = transform(to_equal_area.transform, hull)

        return SpatialSummary(
            central_latitude=centroid.y,
            central_longitude=centroid.x,
            area_sq_km=projected.area / 1_000_000,
        )

    def summarize_records(self, records: list[CanonicalRecord]) -> SpatialSummary:
        return self.summarize(distinct_coordinates(records))
