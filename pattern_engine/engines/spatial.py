"""Density-based spatial clustering of report coordinates.

DBSCAN with the haversine metric over points expressed in radians; the
neighbourhood radius is converted from kilometres by dividing by the
Earth's radius.
"""

import math
from collections import defaultdict
from typing import List

import numpy as np
from sklearn.cluster import DBSCAN

from pattern_engine.domain.geo import EARTH_RADIUS_KM, haversine_km
from pattern_engine.schemas.candidates import GeoPoint, SpatialCluster

NOISE = -1
MIN_RADIUS_KM = 1.0
DENSITY_AREA_KM2 = 1000.0


def cluster_points(points: List[GeoPoint], eps_km: float, min_points: int) -> List[SpatialCluster]:
    """Group ``points`` into clusters of at least ``min_points`` within ``eps_km``.

    Noise points are dropped. Clusters are returned largest first.
    Density is members per 1,000 km² of the smallest circle around the
    centroid that holds every member.
    """
    if len(points) < min_points or min_points < 1:
        return []

    coords = np.radians([[p.latitude, p.longitude] for p in points])
    labels = DBSCAN(
        eps=eps_km / EARTH_RADIUS_KM,
        min_samples=min_points,
        algorithm="ball_tree",
        metric="haversine",
    ).fit(coords).labels_

    members: dict[int, List[GeoPoint]] = defaultdict(list)
    for point, label in zip(points, labels):
        if label != NOISE:
            members[int(label)].append(point)

    clusters: List[SpatialCluster] = []
    for label, group in members.items():
        if len(group) < min_points:
            continue
        center_lat = float(np.mean([p.latitude for p in group]))
        center_lng = float(np.mean([p.longitude for p in group]))
        radius = max(
            max(haversine_km(center_lat, center_lng, p.latitude, p.longitude) for p in group),
            MIN_RADIUS_KM,
        )
        area = math.pi * radius ** 2
        dates = [p.event_date for p in group]
        clusters.append(SpatialCluster(
            label=label,
            report_ids=sorted(p.report_id for p in group),
            center_lat=center_lat,
            center_lng=center_lng,
            count=len(group),
            density=len(group) / area * DENSITY_AREA_KM2,
            categories=sorted({p.category for p in group if p.category}),
            first_date=min(dates),
            last_date=max(dates),
        ))

    clusters.sort(key=lambda c: (-c.count, c.label))
    return clusters
