"""Usage telemetry sent by kintone plugins installed on cybozu/kintone hosts."""
