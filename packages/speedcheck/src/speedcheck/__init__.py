from .config import BenchConfig
from .parsing import BenchmarkParseError, GameSample, SearchSample, SearchSegment
from .stats import SampleStats, summarize

__all__ = [
    "BenchConfig",
    "BenchmarkParseError",
    "GameSample",
    "SampleStats",
    "SearchSample",
    "SearchSegment",
    "summarize",
]
