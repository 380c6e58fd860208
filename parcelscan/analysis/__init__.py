"""
Analysis modules for parcelscan
"""

from .edge_classifier import Edge, EdgeClassification, EdgeClassifier
from .setback_calculator import SetbackComputer, SetbackMeasurement
from .neighborhood import NeighborhoodQuery, NeighborhoodSummary
from .zoning import ZoningLookup
from .geometry_utils import GeometryUtils

__all__ = [
    "Edge",
    "EdgeClassification",
    "EdgeClassifier",
    "SetbackComputer",
    "SetbackMeasurement",
    "NeighborhoodQuery",
    "NeighborhoodSummary",
    "ZoningLookup",
    "GeometryUtils",
]
