# vetscreen/__init__.py
# ======================
# VetScreen — applicant risk assessment & verification pipeline
#
# Components (leaves first):
#   - interview   — transcript credibility / sentiment analyzer
#   - emotion     — emotion sample aggregator
#   - documents   — OCR field extraction, validation, tampering detection
#   - background  — watchlist, identity and duplicate-application checks
#   - risk        — weighted final score, risk tier, explainable report
#
# Orchestration lives in vetscreen.pipeline (run_assessment); registration
# and the reviewer decision live in vetscreen.applications.
