"""Reporting utilities for densenets."""

from .metrics import CsvSink, EpochSink, JsonlSink
from .plots import LossCurvePlotter

__all__ = ["CsvSink", "EpochSink", "JsonlSink", "LossCurvePlotter"]
