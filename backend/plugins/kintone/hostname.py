import re

UNDEFINED_HOST_ID = "___undefined"
DOT_SENTINEL = "_dot_"

_PLATFORM_SUFFIX = re.compile(r"(\.s)?\.(cybozu|kintone)\.com")


def to_host_id(hostname: str | None) -> str:
    """
    Normalizes a reporting hostname into an identifier usable as a store path
    segment.

    Only the first platform suffix is stripped, then every remaining dot is
    replaced, e.g. ``a.b.cybozu.com`` becomes ``a_dot_b``.
    """
    if not hostname:
        return UNDEFINED_HOST_ID
    stripped = _PLATFORM_SUFFIX.sub("", hostname, count=1)
    return stripped.replace(".", DOT_SENTINEL)
