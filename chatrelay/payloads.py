from __future__ import annotations

import math

from chatrelay.menus import MODEL_PAYLOAD_PREFIX, TEMPERATURE_PAYLOAD_PREFIX
from chatrelay.models import (
    CallbackPayload,
    InvalidTemperature,
    ModelSelection,
    TemperatureSelection,
    UnrecognizedPayload,
)

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0


def parse_temperature(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or not MIN_TEMPERATURE <= value <= MAX_TEMPERATURE:
        return None
    return value


def parse_callback_payload(raw: str) -> CallbackPayload:
    """Decode inline-button callback data into a selection.

    ``model:<name>`` keeps everything after the first ``:`` as the model name.
    ``temp:<value>`` must be a finite number within the accepted temperature range.
    """
    if raw.startswith(MODEL_PAYLOAD_PREFIX):
        return ModelSelection(name=raw.split(":", 1)[1])
    if raw.startswith(TEMPERATURE_PAYLOAD_PREFIX):
        value_raw = raw.split(":", 1)[1]
        value = parse_temperature(value_raw)
        if value is None:
            return InvalidTemperature(raw=value_raw)
        return TemperatureSelection(value=value)
    return UnrecognizedPayload(raw=raw)
