"""Export planned reconciliation actions for review."""
from __future__ import annotations

from pathlib import Path
from typing import MutableMapping, Optional, Sequence, Union

import pandas as pd

from .models import ReconciliationAction

PathLike = Union[str, Path]

REPORT_COLUMNS = ["domain", "company", "deal_status", "auto_renew", "expired", "action"]


def actions_to_dataframe(actions: Sequence[ReconciliationAction]) -> pd.DataFrame:
    """Convert actions into a :class:`pandas.DataFrame` with a fixed column order."""

    return pd.DataFrame([action.as_row() for action in actions], columns=REPORT_COLUMNS)


def export_actions(
    actions: Sequence[ReconciliationAction],
    path: PathLike,
    *,
    sheet_name: str = "Actions",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write actions to a CSV, TSV or Excel file and return the path."""

    output_path = Path(path)
    dataframe = actions_to_dataframe(actions)
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = output_path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(output_path, index=False, **exporter_kwargs)
        return output_path

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(output_path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return output_path

    raise ValueError(f"Unsupported report file extension: {suffix}")


__all__ = ["REPORT_COLUMNS", "actions_to_dataframe", "export_actions"]
