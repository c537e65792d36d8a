# vetscreen/risk/__init__.py
# ===========================
# Risk Scorer & Report — VetScreen
#
# Public API:
#   - compute_final_score()   — weighted combination of component scores
#   - determine_risk_tier()   — LOW | MEDIUM | HIGH
#   - build_report()          — explainable assessment report

from vetscreen.risk.scorer import (  # noqa: F401
    DEFAULT_WEIGHTS,
    RiskTier,
    compute_final_score,
    determine_risk_tier,
)
from vetscreen.risk.report import build_report  # noqa: F401
