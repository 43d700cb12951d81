"""Core services of the fetch/cache/batch layer.

- availability_gate - circuit-breaker flag consulted before every search
- query_client      - cache-aware search against ``posts.json``
- count_aggregator  - distinct-post counts with last-known-good fallback
- selection         - ordered-predicate best-image policy
- image_resolver    - durable-cache validation and best-image resolution
- health_check      - clears the availability gate once the API answers
- output_formatter  - plain-text rendering for the CLI
"""

from kexplorer.services.availability_gate import AvailabilityGate
from kexplorer.services.count_aggregator import CountAggregator
from kexplorer.services.health_check import HealthChecker
from kexplorer.services.image_resolver import ImageResolver
from kexplorer.services.query_client import QueryClient
from kexplorer.services.selection import build_predicates, select_best_post

__all__ = [
    "AvailabilityGate",
    "CountAggregator",
    "HealthChecker",
    "ImageResolver",
    "QueryClient",
    "build_predicates",
    "select_best_post",
]
