"""Records one usage event reported by a kintone plugin client."""

PLUGIN_METADATA = {
    "name": "kintone/user",
    "version": "1.0.0",
    "description": "Updates per-host plugin lists, counters and install dates.",
}
