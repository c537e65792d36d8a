# vetscreen/interview/__init__.py
# ================================
# Interview Transcript Analyzer — VetScreen
#
# Public API:
#   - analyze_interview()           — credibility / sentiment from a transcript
#   - interview_component_score()   — 0 unless completed, else mean of both
#
# Store-backed lifecycle (create, record answers and emotion samples,
# complete) lives in vetscreen.interview.service.

from vetscreen.interview.analyzer import (  # noqa: F401
    INTERVIEW_QUESTIONS,
    analyze_interview,
    interview_component_score,
)
