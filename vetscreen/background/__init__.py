# vetscreen/background/__init__.py
# =================================
# Background Check Engine — VetScreen
#
# Public API:
#   - evaluate_background()        — pure sequential scoring
#   - run_background_checks()      — concurrent, timeout-bounded run
#   - perform_background_check()   — store-backed lifecycle

from vetscreen.background.checks import (  # noqa: F401
    WatchlistEntry,
    FakeIdentityPattern,
    DEFAULT_WATCHLIST,
    DEFAULT_FAKE_PATTERNS,
    evaluate_background,
    is_similar_email,
)
