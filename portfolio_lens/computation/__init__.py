"""
Execution harness: background risk worker and metrics cache.
"""

from .metrics_cache import MetricsCache, cache_key
from .risk_worker import RiskWorker

__all__ = ['MetricsCache', 'cache_key', 'RiskWorker']
