"""
Core logic for the Road Hazard Map application.

This package contains configuration, validation, geodesic distance,
proximity alerting, photo storage and hazard data access.
"""
