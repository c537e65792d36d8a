"""
tests/test_risk_scorer.py
==========================
Risk Scorer & Report Tests

Test categories:
    1. Document (OCR) component score and penalties
    2. Background component score and the failed-check refusal
    3. Weighted aggregation, half-up rounding, default evidence -> 40/MEDIUM
    4. Risk tier threshold exactness
    5. Custom weight validation
    6. Report sections, risk-factor and strength checklists at boundaries

All tests are offline — no LLM or API calls.
"""

import os
import sys
import unittest
from datetime import datetime, timezone

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from vetscreen.errors import BackgroundCheckFailedError
from vetscreen.risk.report import (
    RECOMMENDATIONS,
    build_report,
    identify_risk_factors,
    identify_strengths,
)
from vetscreen.risk.scorer import (
    DEFAULT_WEIGHTS,
    background_component_score,
    calculate_ocr_score,
    compute_final_score,
    determine_risk_tier,
    validate_weights,
)


def _doc(match_score=100, status="valid", tampering=False, discrepancies=None) -> dict:
    return {
        "id": 1,
        "document_type": "passport",
        "ocr_result": {
            "match_score": match_score,
            "validation_status": status,
            "tampering_detected": tampering,
            "discrepancies": discrepancies or [],
        },
    }


def _scores(interview=80, emotion=80, ocr=80, background=80) -> dict:
    return {"interview": interview, "emotion": emotion, "ocr": ocr, "background": background}


# ===================================================================
# 1. OCR component
# ===================================================================

class TestOcrScore(unittest.TestCase):

    def test_no_documents_defaults_to_50(self):
        self.assertEqual(calculate_ocr_score([]), 50)

    def test_documents_without_results_default_to_50(self):
        self.assertEqual(calculate_ocr_score([{"id": 1, "ocr_result": None}]), 50)

    def test_single_valid_document(self):
        self.assertEqual(calculate_ocr_score([_doc()]), 100)

    def test_tampering_and_suspicious_penalties(self):
        self.assertEqual(calculate_ocr_score([_doc(100, "suspicious", True)]), 50)

    def test_average_minus_invalid_penalty(self):
        docs = [_doc(80, "valid"), _doc(60, "invalid")]
        self.assertEqual(calculate_ocr_score(docs), 55)

    def test_missing_match_score_counts_as_50(self):
        self.assertEqual(calculate_ocr_score([_doc(None, "valid")]), 50)

    def test_zero_match_score_is_not_replaced(self):
        self.assertEqual(calculate_ocr_score([_doc(0, "valid")]), 0)

    def test_floor_at_zero(self):
        docs = [_doc(10, "suspicious", True), _doc(10, "suspicious", True)]
        self.assertEqual(calculate_ocr_score(docs), 0)


# ===================================================================
# 2. Background component
# ===================================================================

class TestBackgroundComponent(unittest.TestCase):

    def test_missing_check_defaults_to_50(self):
        self.assertEqual(background_component_score(None), 50)

    def test_pending_check_defaults_to_50(self):
        check = {"application_id": 1, "status": "pending", "score": None}
        self.assertEqual(background_component_score(check), 50)

    def test_completed_check_uses_score(self):
        check = {"application_id": 1, "status": "completed", "score": 85}
        self.assertEqual(background_component_score(check), 85)

    def test_failed_check_is_refused(self):
        check = {"application_id": 7, "status": "failed", "score": None}
        with self.assertRaises(BackgroundCheckFailedError) as ctx:
            background_component_score(check)
        self.assertEqual(ctx.exception.application_id, 7)


# ===================================================================
# 3. Aggregation
# ===================================================================

class TestComputeFinalScore(unittest.TestCase):

    def test_default_evidence_is_40_medium(self):
        scores = {"interview": 0, "emotion": 75, "ocr": 50, "background": 50}
        final = compute_final_score(scores)
        self.assertEqual(final, 40)
        self.assertEqual(determine_risk_tier(final), "MEDIUM")

    def test_extremes(self):
        self.assertEqual(compute_final_score(_scores(100, 100, 100, 100)), 100)
        self.assertEqual(compute_final_score(_scores(0, 0, 0, 0)), 0)

    def test_rounds_half_up(self):
        # 0.3 * 5 = 1.5
        self.assertEqual(compute_final_score(_scores(5, 0, 0, 0)), 2)

    def test_custom_weights(self):
        weights = {"interview": 1.0, "emotion": 0.0, "ocr": 0.0, "background": 0.0}
        self.assertEqual(compute_final_score(_scores(33, 90, 90, 90), weights), 33)

    def test_default_weights_are_immutable(self):
        with self.assertRaises(TypeError):
            DEFAULT_WEIGHTS["interview"] = 0.5


# ===================================================================
# 4. Tiers
# ===================================================================

class TestRiskTier(unittest.TestCase):

    def test_threshold_exactness(self):
        self.assertEqual(determine_risk_tier(70), "LOW")
        self.assertEqual(determine_risk_tier(69), "MEDIUM")
        self.assertEqual(determine_risk_tier(40), "MEDIUM")
        self.assertEqual(determine_risk_tier(39), "HIGH")

    def test_bounds(self):
        self.assertEqual(determine_risk_tier(100), "LOW")
        self.assertEqual(determine_risk_tier(0), "HIGH")


# ===================================================================
# 5. Weight validation
# ===================================================================

class TestValidateWeights(unittest.TestCase):

    def test_defaults_valid(self):
        self.assertIs(validate_weights(DEFAULT_WEIGHTS), DEFAULT_WEIGHTS)

    def test_missing_key(self):
        with self.assertRaises(ValueError):
            validate_weights({"interview": 0.5, "emotion": 0.5})

    def test_extra_key(self):
        weights = {**DEFAULT_WEIGHTS, "audio": 0.0}
        with self.assertRaises(ValueError):
            validate_weights(weights)

    def test_bad_sum(self):
        weights = {"interview": 0.3, "emotion": 0.2, "ocr": 0.25, "background": 0.15}
        with self.assertRaises(ValueError):
            validate_weights(weights)

    def test_negative_weight(self):
        weights = {"interview": 1.2, "emotion": -0.2, "ocr": 0.0, "background": 0.0}
        with self.assertRaises(ValueError):
            validate_weights(weights)


# ===================================================================
# 6. Report
# ===================================================================

class TestChecklists(unittest.TestCase):

    def test_boundary_60_triggers_neither_list(self):
        scores = _scores(interview=60, emotion=50, ocr=60, background=60)
        self.assertEqual(identify_risk_factors(scores, [], None), [])
        self.assertEqual(identify_strengths(scores, None), [])

    def test_risk_factor_order(self):
        scores = _scores(interview=10, emotion=10, ocr=10, background=10)
        check = {
            "watchlist_matches": [{"name": "john doe"}],
            "risk_indicators": [{}, {}, {}, {}],
        }
        factors = identify_risk_factors(scores, [_doc(tampering=True)], check)
        self.assertEqual(factors, [
            "Low interview credibility and sentiment scores",
            "Concerning emotional patterns detected during interview",
            "Document verification issues or discrepancies found",
            "Background check revealed potential concerns",
            "Watchlist matches detected",
            "Possible document tampering detected",
            "Multiple risk indicators in background check",
        ])

    def test_three_indicators_not_multiple(self):
        check = {"watchlist_matches": [], "risk_indicators": [{}, {}, {}]}
        self.assertEqual(identify_risk_factors(_scores(), [], check), [])

    def test_strength_thresholds_inclusive(self):
        scores = _scores(interview=75, emotion=70, ocr=80, background=85)
        strengths = identify_strengths(scores, {"completion_rate": 100})
        self.assertEqual(strengths, [
            "Strong interview performance with high credibility",
            "Positive emotional indicators throughout interview",
            "All documents verified successfully with no discrepancies",
            "Clean background check with no red flags",
            "Completed all interview questions thoroughly",
        ])

    def test_strengths_just_below_thresholds(self):
        scores = _scores(interview=74, emotion=69, ocr=79, background=84)
        self.assertEqual(identify_strengths(scores, {"completion_rate": 83}), [])


class TestBuildReport(unittest.TestCase):

    def test_recommendations_are_immutable(self):
        with self.assertRaises(TypeError):
            RECOMMENDATIONS["LOW"] = "Approve."

    def test_default_evidence_report(self):
        scores = {"interview": 0, "emotion": 75, "ocr": 50, "background": 50}
        at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

        report = build_report(None, None, [], [], None, scores, 40, "MEDIUM", assessed_at=at)

        self.assertEqual(report["summary"], {
            "final_score": 40,
            "risk_level": "MEDIUM",
            "assessment_date": at.isoformat(),
            "recommendation": RECOMMENDATIONS["MEDIUM"],
        })
        self.assertFalse(report["interview_analysis"]["completed"])
        self.assertEqual(report["emotion_analysis"]["dominant_emotion"], "none")
        self.assertEqual(report["document_verification"]["documents_submitted"], 0)
        self.assertEqual(report["background_check"]["status"], "not_completed")
        self.assertEqual(report["risk_factors"], [
            "Low interview credibility and sentiment scores",
            "Document verification issues or discrepancies found",
            "Background check revealed potential concerns",
        ])
        self.assertEqual(report["strengths"], ["Positive emotional indicators throughout interview"])

    def test_discrepancies_capped_at_ten(self):
        discrepancies = [{"field": "name", "reason": "Name mismatch"}] * 7
        docs = [_doc(0, "suspicious", discrepancies=discrepancies) for _ in range(2)]
        report = build_report(None, None, [], docs, None, _scores(), 80, "LOW")
        self.assertEqual(len(report["document_verification"]["discrepancies"]), 10)
        self.assertEqual(report["document_verification"]["documents_verified"], 0)

    def test_emotion_and_background_sections(self):
        emotions = [
            {"emotion": "happy", "confidence": 0.9, "elapsed": 1.0},
            {"emotion": "happy", "confidence": 0.8, "elapsed": 2.0},
        ]
        check = {
            "status": "completed",
            "watchlist_matches": [],
            "risk_indicators": [{"type": "similar_email"}],
            "identity_validation": {"validated": True},
        }
        report = build_report(None, None, emotions, [_doc()], check, _scores(), 80, "LOW")

        self.assertEqual(report["emotion_analysis"]["total_detections"], 2)
        self.assertEqual(report["emotion_analysis"]["dominant_emotion"], "happy")
        self.assertEqual(report["document_verification"]["documents_verified"], 1)
        self.assertEqual(report["background_check"]["risk_indicators"], 1)
        self.assertTrue(report["background_check"]["identity_validated"])
        self.assertEqual(report["summary"]["recommendation"], RECOMMENDATIONS["LOW"])


if __name__ == "__main__":
    unittest.main()
