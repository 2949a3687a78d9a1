"""
Utility modules for FitFlow Tasks.

- logging: Logging configuration and structured import-job loggers
"""
