\
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .models import Finding
from .redaction import Redactor


class Reporter:
    """Writes findings.json and summary.md; secret values are redacted first."""

    def __init__(self, out_dir: Path) -> None:
        self.out_dir = out_dir

    def _redacted(self, finding: Finding, redactor: Redactor) -> Dict[str, Any]:
        data = finding.to_dict()
        data["message"] = redactor.redact(data["message"])
        data["suggestion"] = redactor.redact(data["suggestion"])
        return data

    def write_all(
        self,
        findings: Iterable[Finding],
        redactor: Optional[Redactor] = None,
        summary: Optional[Dict[str, Any]] = None,
        exit_code: Optional[int] = None,
    ) -> Dict[str, int]:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        redactor = redactor or Redactor()
        records: List[Dict[str, Any]] = [self._redacted(f, redactor) for f in findings]

        (self.out_dir / "findings.json").write_text(json.dumps(records, indent=2), encoding="utf-8")

        lines = ["# Validation Summary", ""]
        if exit_code is not None:
            lines.append(f"- exit code: {exit_code}")
        for key, value in (summary or {}).get("counts", {}).items():
            lines.append(f"- {key}: {value}")
        lines.append("")
        for item in records:
            lines.append(f"- **file**: {item['file']}  ")
            if item["line"] is not None:
                lines.append(f"  **line**: {item['line']}  ")
            if item["field"]:
                lines.append(f"  **field**: `{item['field']}`  ")
            lines.append(f"  **{item['severity']}** ({item['type']}): {item['message']}  ")
            lines.append("")
        (self.out_dir / "summary.md").write_text("\n".join(lines), encoding="utf-8")
        return {"findings": len(records), "artifacts": 2}
