"""JSON reporter — writes the aggregated profiling result.

The output is a JSON array with one object per source file::

    [
      {
        "fileName": "a.js",
        "profilingDataPerFunction": {
          "foo": [
            {"param": "p1", "type": "FUNCTION", "lineNo": 5, "colNo": 2,
             "executed": 50.0, "data": {"frequency": 5}}
          ]
        }
      }
    ]
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prodprof.models.profiling import ProfilingResultByFile

logger = logging.getLogger(__name__)


class JSONReporter:
    """Serialize profiling results to JSON."""

    def generate(self, output_path: Path, results: list[ProfilingResultByFile]) -> Path:
        """Write the JSON result file.

        The document is rendered in memory first and moved into place
        atomically, so an existing file is never left half-written.

        Args:
            output_path: Path to write the JSON file.
            results: Aggregated results, one entry per source file.

        Returns:
            The path to the generated JSON file.
        """
        content = self.generate_string(results)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            Path(tmp_name).replace(output_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(self, results: list[ProfilingResultByFile]) -> str:
        """Return the JSON result as a string."""
        return json.dumps(serialize_results(results), indent=2, ensure_ascii=False)


def serialize_results(results: list[ProfilingResultByFile]) -> list[dict[str, Any]]:
    """Convert results into JSON-compatible dicts."""
    return [file_result.to_dict() for file_result in results]
