"""HGCROC bias DAC control, settings-file writers, scan, time-in and test-bench helpers."""

__version__ = "0.1.0"