"""
Server modules for Road Hazard Map application.

This package contains FastAPI router modules for handling API endpoints,
authentication and Server-Sent Events broadcasting.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-15
"""
