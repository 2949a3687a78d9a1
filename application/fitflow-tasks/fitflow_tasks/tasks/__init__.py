"""
Task modules for FitFlow Tasks.

- archive_import: one resumable step of a Strava archive import
"""
