"""Build pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from . import constants


@dataclass(frozen=True)
class BuildOptions:
    """Groups translation configuration."""

    filename: str = constants.DEFAULT_FILENAME
    comments: bool = True
    indent: str = constants.DEFAULT_INDENT


@dataclass
class BuildStats:
    """Timing and size statistics for each pipeline stage."""

    source_bytes: int = 0
    source_lines: int = 0

    # Stage timings (seconds)
    parse_time: float = 0.0
    transform_time: float = 0.0
    generate_time: float = 0.0
    total_time: float = 0.0

    # Output sizes
    pass_count: int = 0
    output_lines: int = 0
    mapping_count: int = 0
    warning_count: int = 0

    def report(self) -> str:
        lines = [
            "═══ Build Statistics ═══",
            f"  Source: {self.source_lines} lines, {self.source_bytes} bytes",
            "",
            f"  {'Stage':<20} {'Time':>10}  {'Output':>30}",
            f"  {'─' * 20} {'─' * 10}  {'─' * 30}",
        ]
        stages = [
            ("Parse", self.parse_time, ""),
            ("Transform", self.transform_time, f"{self.pass_count} passes"),
            (
                "Generate",
                self.generate_time,
                f"{self.output_lines} lines, {self.mapping_count} mappings",
            ),
        ]
        for name, t, output in stages:
            time_str = f"{t * 1000:>8.1f}ms"
            lines.append(f"  {name:<20} {time_str:>10}  {output:>30}")

        lines.append(f"  {'─' * 20} {'─' * 10}  {'─' * 30}")
        lines.append(f"  {'Total':<20} {self.total_time * 1000:>8.1f}ms")
        lines.append("")
        lines.append(f"  Warnings: {self.warning_count}")
        return "\n".join(lines)


@dataclass
class BuildResult:
    """Everything one compilation produces."""

    code: str
    map: Any  # SourceMap
    ast: Any  # rewritten Program node
    warnings: list[str] = field(default_factory=list)
    stats: BuildStats = field(default_factory=BuildStats)
