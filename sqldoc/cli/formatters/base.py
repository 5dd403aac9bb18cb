"""
Base formatter interface for CLI output

All formatters must implement the format() method.
"""

from typing import Any, Dict, List

from sqldoc.core.flatten import flatten
from sqldoc.path.codec import encode_path


class BaseFormatter:
    """Base class for all output formatters"""

    def format(self, results: Any, **kwargs) -> str:
        """
        Format results for output

        Args:
            results: A JSON value or a list of row dictionaries
            **kwargs: Additional formatter-specific options

        Returns:
            Formatted string ready for output
        """
        raise NotImplementedError("Formatters must implement format() method")

    def get_name(self) -> str:
        """Get formatter name"""
        return self.__class__.__name__.replace("Formatter", "").lower()


def leaf_rows(value: Any) -> List[Dict[str, Any]]:
    """One {"path", "value"} row per leaf of a JSON value"""
    if value is None:
        return []
    return [{"path": encode_path(keys), "value": leaf} for keys, leaf in flatten(value)]
