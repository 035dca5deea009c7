from .engine import RecommendationEngine, RecommendationResult, recommendation_engine
from .preferences import PreferenceService, UserPreferenceProfile, build_profile

__all__ = [
    "PreferenceService",
    "RecommendationEngine",
    "RecommendationResult",
    "UserPreferenceProfile",
    "build_profile",
    "recommendation_engine",
]
