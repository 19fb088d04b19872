"""
Core services for the synthesis engine.

This package contains the random walk, the time-of-day policy, the vitals and
glucose synthesizers, interpretation, scoring and the service that ties them
to a history store.
"""

from .glucose import GlucoseSynthesizer
from .health_data import HealthDataService
from .history import HistoryStore, InMemoryHistoryStore
from .interpretation import Interpreter
from .random_walk import BoundedRandomWalk
from .result import Result
from .scoring import HealthScorer
from .sources import Clock, FixedClock, RandomSource, SeededRandomSource, SystemClock
from .time_of_day import TimeOfDayPolicy
from .vitals import VitalsSynthesizer

__all__ = [
    "BoundedRandomWalk",
    "Clock",
    "FixedClock",
    "GlucoseSynthesizer",
    "HealthDataService",
    "HealthScorer",
    "HistoryStore",
    "InMemoryHistoryStore",
    "Interpreter",
    "RandomSource",
    "Result",
    "SeededRandomSource",
    "SystemClock",
    "TimeOfDayPolicy",
    "VitalsSynthesizer",
]
