"""
Road Hazard Map application.

A FastAPI-powered service for viewing, filtering and reporting road hazards
on a map, with proximity alerts for nearby hazards.
"""
