"""Web interface helpers."""

from .result_builder import prepare_summary

__all__ = ["prepare_summary"]
