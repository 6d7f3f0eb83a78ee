"""Rules package - journal matchers, unit specs and dependency rules."""

from unit_doctor.rules.catalog import RuleCatalog, build_catalog
from unit_doctor.rules.model import (
    DependencyRule,
    HandlerMatcher,
    LogMatcher,
    MatchHandler,
    StaticMatcher,
    UnitSpec,
    log_prelude,
)

__all__ = [
    "DependencyRule",
    "HandlerMatcher",
    "LogMatcher",
    "MatchHandler",
    "RuleCatalog",
    "StaticMatcher",
    "UnitSpec",
    "build_catalog",
    "log_prelude",
]
