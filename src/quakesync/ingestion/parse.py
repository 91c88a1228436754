"""Decoding of the GeoJSON feature collection."""

from __future__ import annotations

import json
from typing import Any

from quakesync.results import DecodeFailure


def parse_feed(payload: bytes) -> list[dict[str, Any]] | DecodeFailure:
    """Decode *payload* and return its ``features`` list.

    An empty feature list is a valid result. Anything that is not a JSON
    object carrying a ``features`` array yields a :class:`DecodeFailure`.
    Individual features are returned as-is; validating them is the
    normalizer's job.
    """
    try:
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        return DecodeFailure(f"payload is not valid JSON: {exc}")

    if not isinstance(document, dict):
        return DecodeFailure(f"expected a JSON object, got {type(document).__name__}")

    features = document.get("features")
    if features is None:
        return DecodeFailure("payload has no 'features' collection")
    if not isinstance(features, list):
        return DecodeFailure(f"'features' is a {type(features).__name__}, not an array")

    return features
