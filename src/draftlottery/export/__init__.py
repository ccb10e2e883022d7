"""Result export helpers."""

from .results import (
    RESULT_HEADERS,
    ExportError,
    export_matrix_to_csv,
    export_result_to_csv,
    export_result_to_json,
    pick_label,
)

__all__ = [
    "ExportError",
    "RESULT_HEADERS",
    "export_matrix_to_csv",
    "export_result_to_csv",
    "export_result_to_json",
    "pick_label",
]
