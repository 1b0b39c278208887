"""
Retrieve package - strategy chain, strategies and the response validator.

Re-exports the public symbols so `from tools.retrieve import X` works.
"""

from .chain import retrieve, DEFAULT_STRATEGIES
from .strategies import (
    AttemptContext,
    Strategy,
    StrategyMatch,
    ViewOnlyPdfStrategy,
    NativeExportStrategy,
    DirectDownloadStrategy,
    ConfirmationStrategy,
)
from .validator import Verdict, validate_candidate, is_interstitial, HTML_MARKERS
