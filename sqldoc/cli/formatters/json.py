"""
JSON formatter for machine-readable output
"""

import json
from typing import Any

from sqldoc.cli.formatters.base import BaseFormatter


class JSONFormatter(BaseFormatter):
    """Format results as JSON"""

    def format(self, results: Any, **kwargs) -> str:
        """
        Format results as JSON

        Args:
            results: Any JSON value
            **kwargs: Options like 'compact', 'indent'

        Returns:
            JSON string
        """
        if kwargs.get("compact", False):
            return json.dumps(results, separators=(",", ":"), ensure_ascii=False)
        else:
            indent = kwargs.get("indent", 2)
            return json.dumps(results, indent=indent, ensure_ascii=False)
