"""Pipelines for ingestion, catalog import, normalization and matching.

Each step is callable independently from the API or from batch scripts.
"""
