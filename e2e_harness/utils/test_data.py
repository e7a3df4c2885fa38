"""
Read-only access to the JSON test data file.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.exceptions import FileOperationError, TestDataError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TEST_DATA_FILE = Path("test-data") / "test-data.json"


class TestDataStore:
    """Keyed test data loaded lazily from a JSON object file."""

    __test__ = False

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else Path.cwd() / DEFAULT_TEST_DATA_FILE
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._data is None:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise FileOperationError(
                    f"Failed to load test data from {self.path}: {e}",
                    file_path=str(self.path),
                    operation="read",
                )
            if not isinstance(data, dict):
                raise FileOperationError(
                    f"Test data file must contain a JSON object: {self.path}",
                    file_path=str(self.path),
                    operation="read",
                )
            self._data = data
        return self._data

    def get(self, key: str) -> Any:
        """
        Return the value stored under ``key``.

        Raises:
            TestDataError: if the key is absent
        """
        logger.debug(f"Getting test data for key: {key}")
        data = self._load()
        if key not in data:
            logger.error(f"Test data not found for key: {key}")
            raise TestDataError(f"Test data not found for key: {key}", key=key)
        return data[key]

    def get_all(self) -> Dict[str, Any]:
        return dict(self._load())

    def has_key(self, key: str) -> bool:
        return key in self._load()

    def keys(self) -> List[str]:
        return list(self._load().keys())
