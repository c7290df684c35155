"""
Checklist runner.

Evaluates every enabled rule against each MeshPart and gathers the results
into a LintReport. A MeshPart passes when no error-severity rule fails (in
strict mode, warnings fail it too).
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Optional, Iterable, Union

from partlint.mesh_summary import MeshSummary, load_summaries, SUPPORTED_EXTENSIONS
from partlint.profile import LintProfile, SEVERITIES
from partlint.rules import Rule, all_rules


@dataclass
class Finding:
    """One failed check."""
    rule_id: str
    severity: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"rule": self.rule_id, "severity": self.severity, "message": self.message}


@dataclass
class LintReport:
    """Results of linting one MeshPart."""
    name: str
    source: Optional[str] = None
    findings: List[Finding] = field(default_factory=list)
    checked: List[str] = field(default_factory=list)
    strict: bool = False

    @property
    def counts(self) -> Dict[str, int]:
        counts = {severity: 0 for severity in SEVERITIES}
        for finding in self.findings:
            counts[finding.severity] += 1
        return counts

    @property
    def passed(self) -> bool:
        counts = self.counts
        if self.strict:
            return counts["error"] == 0 and counts["warning"] == 0
        return counts["error"] == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = {
            "name": self.name,
            "passed": self.passed,
            "counts": self.counts,
            "checked": list(self.checked),
            "findings": [f.to_dict() for f in self.findings],
        }
        if self.source:
            d["source"] = self.source
        return d

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def format_text(self) -> str:
        """Human-readable report."""
        status = "PASS" if self.passed else "FAIL"
        header = f"{status} {self.name}"
        if self.source:
            header += f" ({self.source})"

        lines = [header]
        for finding in self.findings:
            lines.append(f"  [{finding.severity}] {finding.rule_id}: {finding.message}")

        counts = self.counts
        lines.append(
            f"  {len(self.checked)} checks, "
            f"{counts['error']} error(s), {counts['warning']} warning(s), {counts['info']} info"
        )
        return "\n".join(lines)


def enabled_rules(profile: LintProfile, rules: Optional[Iterable[Rule]] = None) -> List[Rule]:
    """Rules to run under a profile, in order."""
    rules = all_rules() if rules is None else list(rules)
    disabled = set(profile.disabled_rules)
    return [r for r in rules if r.id not in disabled]


def lint_summary(
    summary: MeshSummary,
    profile: LintProfile,
    rules: Optional[Iterable[Rule]] = None,
    strict: bool = False,
) -> LintReport:
    """
    Run the checklist on one MeshPart.

    Args:
        summary: Mesh description
        profile: Reference tables and limits
        rules: Rules to run (defaults to every registered rule)
        strict: Treat warnings as failures

    Returns:
        LintReport
    """
    report = LintReport(name=summary.name, source=summary.source, strict=strict)

    for r in enabled_rules(profile, rules):
        report.checked.append(r.id)
        message = r.check(summary, profile)
        if message is None:
            continue
        severity = profile.severity_overrides.get(r.id, r.severity)
        report.findings.append(Finding(rule_id=r.id, severity=severity, message=message))

    return report


def lint_file(
    path: Union[str, Path],
    profile: LintProfile,
    strict: bool = False,
) -> List[LintReport]:
    """Lint every MeshPart in one geometry file or mesh description."""
    summaries = load_summaries(path, units=profile.source_units)
    return [lint_summary(s, profile, strict=strict) for s in summaries]


def collect_files(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """
    Expand files and directories into a sorted list of lintable files.

    Directories are searched recursively; explicit files are kept as given.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    files = []
    for p in paths:
        p = Path(p)
        if not p.exists():
            raise FileNotFoundError(f"Path not found: {p}")
        if p.is_dir():
            files.extend(
                f for f in sorted(p.rglob("*"))
                if f.is_file() and f.suffix.lower() in SUPPORTED_EXTENSIONS
            )
        else:
            files.append(p)
    return files


def lint_paths(
    paths: Iterable[Union[str, Path]],
    profile: LintProfile,
    strict: bool = False,
    verbose: bool = False,
) -> List[LintReport]:
    """
    Lint files and directories, one file at a time.

    Args:
        paths: Files or directories
        profile: Reference tables and limits
        strict: Treat warnings as failures
        verbose: Print progress

    Returns:
        All reports, in file order
    """
    files = collect_files(paths)
    if verbose:
        print(f"Linting {len(files)} file(s) with profile '{profile.name}'")

    reports = []
    for path in files:
        file_reports = lint_file(path, profile, strict=strict)
        if verbose:
            failed = sum(1 for r in file_reports if not r.passed)
            print(f"{path}: {len(file_reports)} MeshPart(s), {failed} failed")
        reports.extend(file_reports)

    if verbose and not files:
        print("Warning: no lintable files found")

    return reports
