"""
Routes package for the Taskflow API.

This package contains route blueprints:
- api: health check and task endpoints
- auth: account registration, login and profile
"""
