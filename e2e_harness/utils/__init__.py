"""Utility helpers for test authors."""

from . import common, dates, files
from .db import DBConfig, DBUtils
from .test_data import TestDataStore

__all__ = ["common", "dates", "files", "DBConfig", "DBUtils", "TestDataStore"]
