"""In-process webhook counters rendered in Prometheus text format."""

from collections import Counter

METRIC_NAME = "clerk_sync_webhook_events_total"

_webhook_counts: Counter[tuple[str, str]] = Counter()


def record_webhook(event_type: str, outcome: str) -> None:
    """Count one webhook delivery by event type and outcome."""
    _webhook_counts[(event_type, outcome)] += 1


def webhook_counts() -> dict[tuple[str, str], int]:
    return dict(_webhook_counts)


def reset_webhook_counts() -> None:
    """Clear all counters (for tests)."""
    _webhook_counts.clear()


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _prom_metric_line(name: str, value: int | float, labels: dict[str, str] | None = None) -> str:
    if not labels:
        return f"{name} {value}"

    label_str = ",".join([f'{k}="{_escape_label(v)}"' for k, v in labels.items()])
    return f"{name}{{{label_str}}} {value}"


def render_prometheus() -> str:
    lines = [
        f"# HELP {METRIC_NAME} Clerk webhook deliveries by event type and outcome",
        f"# TYPE {METRIC_NAME} counter",
    ]
    for (event_type, outcome), count in sorted(_webhook_counts.items()):
        lines.append(
            _prom_metric_line(METRIC_NAME, count, {"event_type": event_type, "outcome": outcome})
        )
    return "\n".join(lines) + "\n"


__all__ = [
    "METRIC_NAME",
    "record_webhook",
    "webhook_counts",
    "reset_webhook_counts",
    "render_prometheus",
]
