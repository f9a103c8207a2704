import hashlib

# Bump when the shape of a persisted result changes so reruns don't collide with old rows
RESULT_SCHEMA_VERSION = "v1"


def idempotency_key(kind: str, *ids) -> str:
    """Stable key for a persisted result: sha256 over kind, schema version and input ids"""
    raw = ":".join([kind, RESULT_SCHEMA_VERSION] + [str(i) for i in ids])
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
