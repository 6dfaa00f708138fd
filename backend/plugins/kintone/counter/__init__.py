"""Totals of all host counters, with the lazily written daily summary."""

PLUGIN_METADATA = {
    "name": "kintone/counter",
    "version": "1.0.0",
    "description": "Reports total events and hosts and snapshots them once per day.",
}
