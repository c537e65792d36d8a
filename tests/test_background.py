"""
tests/test_background.py
=========================
Background Check Engine Tests

Test categories:
    1. Watchlist screening
    2. Identity validation
    3. Email similarity and duplicate detection (self-exclusion)
    4. Aggregate score and risk indicators
    5. Concurrent engine: timeout and sub-check failure
    6. Store-backed lifecycle: pending -> completed | failed

All tests are offline; simulated delays are disabled or kept tiny.
"""

import os
import sys
import unittest
from unittest.mock import patch

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vetscreen.background.checks import (
    WatchlistEntry,
    calculate_background_score,
    check_duplicates,
    check_watchlist,
    evaluate_background,
    is_similar_email,
    validate_identity,
)
from vetscreen.background.engine import perform_background_check, run_background_checks
from vetscreen.db.base import Base
from vetscreen.db.models import Applicant, Application, BackgroundCheck
from vetscreen.errors import BackgroundCheckFailedError, NotFoundError, SubCheckFailureError
from vetscreen.pipeline import run_assessment

NO_DELAY = (0.0, 0.0)


# ===================================================================
# 1. Watchlist
# ===================================================================

class TestWatchlist(unittest.TestCase):

    def test_exact_match_case_insensitive(self):
        result = check_watchlist("JOHN DOE")
        self.assertFalse(result["clean"])
        self.assertEqual(result["matches"][0]["reason"], "fraud")
        self.assertEqual(result["matches"][0]["severity"], "high")

    def test_containment_either_direction(self):
        self.assertEqual(len(check_watchlist("John Doe Smith")["matches"]), 1)
        self.assertEqual(len(check_watchlist("  Jane ")["matches"]), 1)

    def test_clean_name(self):
        result = check_watchlist("Alice Walker")
        self.assertTrue(result["clean"])
        self.assertEqual(result["databases_searched"], ["INTERPOL", "FBI", "OFAC", "EU Sanctions"])

    def test_blank_name_matches_nothing(self):
        self.assertTrue(check_watchlist("")["clean"])
        self.assertTrue(check_watchlist("   ")["clean"])

    def test_injected_watchlist(self):
        watchlist = (WatchlistEntry("alice walker", "sanctions", "medium"),)
        self.assertFalse(check_watchlist("Alice Walker", watchlist)["clean"])
        self.assertTrue(check_watchlist("John Doe", watchlist)["clean"])


# ===================================================================
# 2. Identity
# ===================================================================

class TestIdentity(unittest.TestCase):

    def test_clean_identity(self):
        result = validate_identity("Alice Walker", "alice.walker@example.com")
        self.assertEqual(result, {"validated": True, "issues": [], "confidence": 100})

    def test_generated_name_and_temp_email(self):
        result = validate_identity("ab123", "x@tempmail.com")
        severities = sorted(issue["severity"] for issue in result["issues"])
        self.assertEqual(severities, ["high", "medium"])
        self.assertFalse(result["validated"])
        self.assertEqual(result["confidence"], 50)

    def test_test_user_pattern(self):
        result = validate_identity("Test User", "real@example.com")
        self.assertEqual(result["issues"][0]["type"], "fake_identity")

    def test_short_name(self):
        result = validate_identity("Al", "al@example.com")
        self.assertEqual(result["issues"][-1]["type"], "invalid_name")


# ===================================================================
# 3. Duplicates
# ===================================================================

class TestDuplicates(unittest.TestCase):

    def test_punctuation_insensitive_similarity(self):
        self.assertTrue(is_similar_email("j.doe@mail.com", "jdoe@mail.com"))
        self.assertTrue(is_similar_email("J_Doe@Mail.com", "jdoe@mail.com"))

    def test_same_local_part_different_domain(self):
        self.assertTrue(is_similar_email("jdoe@mail.com", "jdoe@other.com"))

    def test_unrelated_emails(self):
        self.assertFalse(is_similar_email("jdoe@mail.com", "asmith@mail.com"))
        self.assertFalse(is_similar_email("", "jdoe@mail.com"))

    def test_self_and_same_email_excluded(self):
        pool = [
            {"application_id": 1, "email": "jdoe@mail.com", "created_at": None},
            {"application_id": 2, "email": "JDoe@mail.com", "created_at": None},
            {"application_id": 3, "email": "j.doe@mail.com", "created_at": "2026-01-01T00:00:00"},
            {"application_id": 4, "email": "someone@mail.com", "created_at": None},
        ]
        result = check_duplicates(1, "jdoe@mail.com", pool)
        self.assertTrue(result["has_duplicates"])
        self.assertEqual([d["application_id"] for d in result["duplicates"]], [3])
        self.assertEqual(result["duplicates"][0]["type"], "similar_email")

    def test_no_pool(self):
        self.assertEqual(
            check_duplicates(1, "jdoe@mail.com", []),
            {"checked": True, "duplicates": [], "has_duplicates": False},
        )


# ===================================================================
# 4. Aggregation
# ===================================================================

class TestBackgroundScore(unittest.TestCase):

    def test_clean_applicant_scores_100(self):
        result = evaluate_background(1, "Alice Walker", "alice@example.com", [])
        self.assertEqual(result["score"], 100)
        self.assertEqual(result["risk_indicators"], [])

    def test_watchlist_penalty_and_indicator(self):
        result = evaluate_background(1, "John Doe", "john.doe@example.com", [])
        self.assertEqual(result["score"], 70)
        self.assertEqual(result["risk_indicators"][0]["type"], "watchlist")

    def test_penalties_combine_and_clamp(self):
        watchlist = {"matches": [{}, {}, {}]}
        identity = {"issues": [{"severity": "high"}, {"severity": "high"}, {"severity": "medium"}]}
        duplicates = {"duplicates": [{}]}
        # 100 - 90 - 40 - 10 - 15 < 0
        self.assertEqual(calculate_background_score(watchlist, identity, duplicates), 0)

    def test_indicators_are_union(self):
        pool = [{"application_id": 2, "email": "ab123@other.com", "created_at": None}]
        result = evaluate_background(1, "ab123", "ab123@tempmail.com", pool)
        types = [indicator["type"] for indicator in result["risk_indicators"]]
        self.assertEqual(types, ["fake_identity", "suspicious_email", "similar_email"])
        # 100 - 20 - 10 - 15
        self.assertEqual(result["score"], 55)


# ===================================================================
# 5. Concurrent engine
# ===================================================================

class TestRunBackgroundChecks(unittest.TestCase):

    def test_matches_sequential_result(self):
        pool = [{"application_id": 2, "email": "j.doe@mail.com", "created_at": None}]
        concurrent = run_background_checks(1, "John Doe", "jdoe@mail.com", pool, delay_range=NO_DELAY)
        sequential = evaluate_background(1, "John Doe", "jdoe@mail.com", pool)
        self.assertEqual(concurrent, sequential)

    def test_timeout_is_failure(self):
        with self.assertRaises(SubCheckFailureError) as ctx:
            run_background_checks(
                1, "Alice Walker", "alice@example.com", [],
                timeout=0.05, delay_range=(0.5, 0.5),
            )
        self.assertIn("timed out", str(ctx.exception))

    @patch("vetscreen.background.engine.check_watchlist", side_effect=RuntimeError("service down"))
    def test_sub_check_exception_is_failure(self, _mock_watchlist):
        with self.assertRaises(SubCheckFailureError) as ctx:
            run_background_checks(1, "Alice Walker", "alice@example.com", [], delay_range=NO_DELAY)
        self.assertEqual(ctx.exception.check, "watchlist")
        self.assertIn("service down", str(ctx.exception))


# ===================================================================
# 6. Store-backed lifecycle
# ===================================================================

class TestPerformBackgroundCheck(unittest.TestCase):

    def setUp(self):
        self.engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.session = sessionmaker(autoflush=False, bind=self.engine)()

        alice = Applicant(email="jdoe@mail.com", full_name="Alice Walker")
        other = Applicant(email="j.doe@mail.com", full_name="Jon Dough")
        self.application = Application(applicant=alice, position="Analyst")
        reapplication = Application(applicant=alice, position="Engineer")
        other_application = Application(applicant=other, position="Analyst")
        self.session.add_all([alice, other, self.application, reapplication, other_application])
        self.session.commit()
        self.other_application_id = other_application.id

    def tearDown(self):
        self.session.close()
        Base.metadata.drop_all(bind=self.engine)

    def test_completed_check_persists_score(self):
        check = perform_background_check(self.session, self.application.id, delay_range=NO_DELAY)

        self.assertEqual(check.status, "completed")
        self.assertIsNotNone(check.completed_at)
        # Only the other applicant's similar email counts; the re-application is excluded
        self.assertEqual(
            [d["application_id"] for d in check.duplicate_checks],
            [self.other_application_id],
        )
        self.assertEqual(check.score, 85)
        self.assertEqual(len(check.risk_indicators), 1)

    @patch("vetscreen.background.engine.check_duplicates", side_effect=RuntimeError("db offline"))
    def test_failed_check_has_no_score(self, _mock_duplicates):
        with self.assertRaises(SubCheckFailureError):
            perform_background_check(self.session, self.application.id, delay_range=NO_DELAY)

        check = self.session.query(BackgroundCheck).one()
        self.assertEqual(check.status, "failed")
        self.assertIsNone(check.score)
        self.assertIn("db offline", check.error)

    def test_failed_check_can_be_rerun(self):
        with patch("vetscreen.background.engine.validate_identity", side_effect=RuntimeError("boom")):
            with self.assertRaises(SubCheckFailureError):
                perform_background_check(self.session, self.application.id, delay_range=NO_DELAY)

        check = perform_background_check(self.session, self.application.id, delay_range=NO_DELAY)
        self.assertEqual(check.status, "completed")
        self.assertIsNone(check.error)
        self.assertEqual(self.session.query(BackgroundCheck).count(), 1)

    def test_pool_query_failure_marks_rerun_failed(self):
        first = perform_background_check(self.session, self.application.id, delay_range=NO_DELAY)
        self.assertEqual(first.score, 85)

        error = OperationalError("SELECT applications", {}, Exception("database is locked"))
        with patch("vetscreen.background.engine._duplicate_pool", side_effect=error):
            with self.assertRaises(SubCheckFailureError) as ctx:
                perform_background_check(self.session, self.application.id, delay_range=NO_DELAY)
        self.assertEqual(ctx.exception.check, "duplicates")

        self.session.expire_all()
        check = self.session.query(BackgroundCheck).one()
        self.assertEqual(check.status, "failed")
        self.assertIsNone(check.score)
        self.assertIn("database is locked", check.error)

        # The assessment refuses a failed check instead of defaulting to 50
        with self.assertRaises(BackgroundCheckFailedError):
            run_assessment(self.application.id, self.session)

    def test_unexpected_error_marks_check_failed(self):
        with patch("vetscreen.background.engine.run_background_checks", side_effect=KeyError("score")):
            with self.assertRaises(KeyError):
                perform_background_check(self.session, self.application.id, delay_range=NO_DELAY)

        self.session.expire_all()
        check = self.session.query(BackgroundCheck).one()
        self.assertEqual(check.status, "failed")
        self.assertIsNone(check.score)
        self.assertIsNotNone(check.error)

    def test_unknown_application(self):
        with self.assertRaises(NotFoundError):
            perform_background_check(self.session, 999, delay_range=NO_DELAY)


if __name__ == "__main__":
    unittest.main()
