"""Console output for detection results (--detect and the setup summary)."""

import json
import logging
from typing import Any

import click

from ..constants import confidence_marker
from .features import ordered_features
from .result import DetectionResult

logger = logging.getLogger(__name__)


def display_detection_summary(result: DetectionResult) -> None:
    """Display human-readable detection summary to console.

    CONTRACT:
      Inputs:
        - result: DetectionResult with detected frameworks and features

      Outputs:
        - None (prints to console)

      Invariants:
        - Empty sections omitted from display
        - Never raises exceptions other than interrupts

      Algorithm:
        1. Print "Frameworks:" with name, confidence marker and source file
        2. Print "Features:" in registry order
        3. Print scan statistics
    """
    try:
        click.echo("\n📋 Auto-detected from project:\n")

        if result.frameworks:
            click.echo("Frameworks:")
            for item in result.frameworks:
                marker = confidence_marker(item.confidence)
                click.echo(f"  • {item.name}{marker} - from {item.source_file}")
            click.echo()

        if result.features:
            click.echo("Features:")
            click.echo(f"  {', '.join(ordered_features(result.features))}")
            click.echo()

        if result.scan_stats:
            stats = result.scan_stats
            failures = (
                f", {stats.lookup_failures} lookups failed"
                if stats.lookup_failures
                else ""
            )
            click.echo(
                f"Scan: {stats.indicators_checked} indicators checked{failures} "
                f"in {stats.duration_ms}ms\n"
            )
    except (KeyboardInterrupt, SystemExit):
        raise
    except (OSError, TypeError, ValueError, AttributeError) as e:
        logger.debug(f"Error displaying detection summary: {e}")
    except click.ClickException as e:
        logger.debug(f"Click error displaying detection summary: {e}")


def detection_to_dict(result: DetectionResult) -> dict[str, Any]:
    """Convert a DetectionResult to JSON-serializable data."""
    return {
        "frameworks": [
            {
                "name": item.name,
                "confidence": item.confidence,
                "source_file": item.source_file,
                "source_evidence": item.source_evidence,
            }
            for item in result.frameworks
        ],
        "features": ordered_features(result.features),
        "scan_stats": (
            {
                "indicators_checked": result.scan_stats.indicators_checked,
                "lookup_failures": result.scan_stats.lookup_failures,
                "duration_ms": result.scan_stats.duration_ms,
            }
            if result.scan_stats
            else None
        ),
    }


def display_detection_json(result: DetectionResult) -> None:
    """Print detection results as indented JSON on stdout."""
    click.echo(json.dumps(detection_to_dict(result), indent=2))
