"""
Domain layer - slide content contract, presentation profile and sanitization.

Pure data and rules, independent of the web layer and the AI backends.
"""

from .exceptions import DomainError
from .profile import PRESTIGE_FOODS, PresentationProfile
from .slide import AppState, Deck, LayoutType, SlideRecord
