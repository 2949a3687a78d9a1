"""
FitFlow Tasks - Celery worker for the fitness activity import pipeline.

This package provides:
- Strava archive import orchestration, one activity per queue message
- Storage, map renderer and database wiring from environment configuration
"""

__version__ = "0.1.0"

from fitflow_tasks.celery_app import celery_app

__all__ = ["celery_app"]
