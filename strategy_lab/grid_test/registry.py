"""
Component registry: maps config ``type`` keys to selector, signal and target classes.

Specs are plain dicts (as loaded from YAML), e.g.::

    {"type": "return", "target_return": 0.02, "stop_loss": 0.01, "in_days": 1}

A list value for a scalar parameter expands into one component per value, so
``{"type": "return", "target_return": [0.02, 0.06], ...}`` builds two targets.
"""
import itertools
from typing import Any, Callable, Dict, List, Mapping, Sequence

from ..selectors import (
    AtrSelector, MacdSelector, RsiSelector, BreakthroughPullbackSelector, VolumeDeclineSelector,
)
from ..signals import (
    CloseSignal, OpenSignal, LimitPriceSignal, BottomReverseSignal, VolumeSurgeSignal, VolumeDeclineSignal,
)
from ..targets import ReturnTarget, GuardTarget, CombinedTarget, ExitTarget
from ..shared.errors import ConfigurationError

SELECTORS: Dict[str, Callable] = {
    "atr": AtrSelector,
    "macd": MacdSelector,
    "rsi": RsiSelector,
    "breakthrough_pullback": BreakthroughPullbackSelector,
    "volume_decline": VolumeDeclineSelector,
}

SIGNALS: Dict[str, Callable] = {
    "close": CloseSignal,
    "open": OpenSignal,
    "limit": LimitPriceSignal,
    "bottom_reverse": BottomReverseSignal,
    "volume_surge": VolumeSurgeSignal,
    "volume_decline": VolumeDeclineSignal,
}

TARGETS: Dict[str, Callable] = {
    "return": ReturnTarget,
    "guard": GuardTarget,
    "combined": CombinedTarget,
}

# Parameters whose value is legitimately a list (never grid-expanded)
_LIST_PARAMS = {"targets", "weights"}


def expand_spec(spec: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Expand list-valued parameters into the cross product of specs."""
    keys = [k for k, v in spec.items() if isinstance(v, (list, tuple)) and k not in _LIST_PARAMS]
    if not keys:
        return [dict(spec)]
    expanded = []
    for values in itertools.product(*(spec[k] for k in keys)):
        item = dict(spec)
        item.update(zip(keys, values))
        expanded.append(item)
    return expanded


def _build_one(registry: Mapping[str, Callable], label: str, spec: Any):
    if not isinstance(spec, Mapping):
        raise ConfigurationError(label, f"must be a mapping with a 'type' key, got {spec!r}")
    params = dict(spec)
    kind = params.pop("type", None)
    if kind not in registry:
        raise ConfigurationError(f"{label}.type", f"unknown type {kind!r}, expected one of {sorted(registry)}")

    if kind == "combined":
        nested = params.get("targets")
        if not isinstance(nested, (list, tuple)):
            raise ConfigurationError(f"{label}.targets", "must be a list of target specs")
        params["targets"] = [_build_one(TARGETS, f"{label}.targets[{i}]", t) for i, t in enumerate(nested)]

    try:
        return registry[kind](**params)
    except ConfigurationError as e:
        raise ConfigurationError(f"{label}.{e.parameter}", e.message) from e
    except TypeError as e:
        # Unknown or missing keyword arguments
        raise ConfigurationError(label, str(e)) from e


def _build_section(registry: Mapping[str, Callable], section: str, specs: Sequence[Any]) -> list:
    if not specs:
        raise ConfigurationError(section, "must contain at least one entry")
    components = []
    for i, spec in enumerate(specs):
        label = f"{section}[{i}]"
        if not isinstance(spec, Mapping):
            raise ConfigurationError(label, f"must be a mapping with a 'type' key, got {spec!r}")
        for item in expand_spec(spec):
            components.append(_build_one(registry, label, item))

    seen = set()
    for component in components:
        if component.id in seen:
            raise ConfigurationError(section, f"duplicate component id {component.id!r}")
        seen.add(component.id)
    return components


def build_selectors(specs: Sequence[Any]) -> list:
    return _build_section(SELECTORS, "selectors", specs)


def build_signals(specs: Sequence[Any]) -> list:
    return _build_section(SIGNALS, "signals", specs)


def build_targets(specs: Sequence[Any]) -> List[ExitTarget]:
    return _build_section(TARGETS, "targets", specs)
