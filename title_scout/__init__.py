# title_scout/__init__.py
"""
TitleScout package initializer.
Defines package version; the CLI lives in :mod:`title_scout.cli`.
"""
__version__ = "0.1.0"
