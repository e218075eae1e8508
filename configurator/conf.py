"""Engine tunables from ``settings.CONFIGURATOR``.

    CONFIGURATOR = {
        "COMPATIBILITY": {"safety_margin": 0.8},
        "SCORING": {"bottleneck_threshold": 30},
    }

Unknown keys are ignored with a warning. Call ``reset()`` after changing the
setting at runtime (tests do this via ``setting_changed``).
"""
import logging
from dataclasses import fields
from functools import lru_cache

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

from .services.policy import CompatibilityPolicy, ScoringPolicy

logger = logging.getLogger(__name__)


def _section(name):
    return (getattr(settings, "CONFIGURATOR", None) or {}).get(name) or {}


def _build(policy_class, overrides):
    known = {f.name for f in fields(policy_class)}
    kwargs = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning("Ignoring unknown %s option %r", policy_class.__name__, key)
            continue
        if isinstance(value, list):
            # Tuple-valued options come through as lists from JSON/env config.
            value = tuple(tuple(v) if isinstance(v, list) else v for v in value)
        kwargs[key] = value
    return policy_class(**kwargs)


@lru_cache(maxsize=None)
def get_compatibility_policy():
    return _build(CompatibilityPolicy, _section("COMPATIBILITY"))


@lru_cache(maxsize=None)
def get_scoring_policy():
    return _build(ScoringPolicy, _section("SCORING"))


def reset():
    get_compatibility_policy.cache_clear()
    get_scoring_policy.cache_clear()


@receiver(setting_changed)
def _reset_on_setting_changed(sender, setting, **kwargs):
    if setting == "CONFIGURATOR":
        reset()
