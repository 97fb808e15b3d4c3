"""Output formatting for decoded beacons.

Supports JSON and YAML for machine processing and a grouped plain-text
layout for reading in a terminal.
"""

import json
from typing import List, Sequence

import yaml

from ..providers import ParsedBeacon


class BeaconFormatter:
    """Formats decoded beacons into various output formats."""

    def __init__(self, format_type: str = "json"):
        self.format_type = format_type.lower()

    def format(self, beacon: ParsedBeacon) -> str:
        """Format a single decoded beacon."""
        if self.format_type == "json":
            return json.dumps(beacon.to_dict(), indent=2)
        elif self.format_type == "yaml":
            return yaml.safe_dump(beacon.to_dict(), default_flow_style=False, sort_keys=False)
        else:
            return self._format_text(beacon)

    def format_many(self, beacons: Sequence[ParsedBeacon]) -> str:
        """Format several decoded beacons as one document."""
        if self.format_type == "json":
            return json.dumps([beacon.to_dict() for beacon in beacons], indent=2)
        elif self.format_type == "yaml":
            return yaml.safe_dump(
                [beacon.to_dict() for beacon in beacons],
                default_flow_style=False,
                sort_keys=False
            )
        else:
            return "\n\n".join(self._format_text(beacon) for beacon in beacons)

    def _format_text(self, beacon: ParsedBeacon) -> str:
        """Format a beacon as grouped text."""
        provider = beacon.provider
        lines: List[str] = [f"{provider.name} [{provider.key}] ({provider.type})"]

        if not beacon.data:
            lines.append("  (no decoded parameters)")
            return "\n".join(lines)

        for group, fields in beacon.groups().items():
            lines.append(f"  {group}")
            width = max(len(item.field) for item in fields)
            for item in fields:
                lines.append(f"    {item.field.ljust(width)}  {item.value}")

        return "\n".join(lines)
