"""Tests for the activity keyword taxonomy."""

import pytest

from models.activity import Category
from parsers.classifier import ACTION_VOCABULARY, CATEGORY_RULES, classify, passes_gate


class TestClassify:
    def test_blog_post_is_content(self):
        assert classify("Published blog post about AI search") == Category.CONTENT

    def test_outreach_email(self):
        assert classify("Sent cold outreach email to 10 prospects") == Category.OUTREACH

    @pytest.mark.parametrize("text,expected", [
        ("Posted thread on LinkedIn", Category.SOCIAL),
        ("Deployed API to production", Category.DEVELOPMENT),
        ("Drafted launch plan", Category.DOCUMENT),
        ("Finished reading a book", Category.OTHER),
    ])
    def test_rule_buckets(self, text, expected):
        assert classify(text) == expected

    def test_case_insensitive(self):
        assert classify("PUBLISHED AN ARTICLE") == Category.CONTENT

    def test_first_rule_wins(self):
        # "posted" (social) and "fixed" (development) both match
        assert classify("Posted about how I fixed the build") == Category.SOCIAL

    def test_keywords_match_inside_words(self):
        assert classify("Fixed admin dashboard") == Category.OUTREACH

    def test_total_on_empty_and_odd_input(self):
        for text in ("", "   ", "!!!", "12:00", "ünïcödé"):
            assert classify(text) in Category

    def test_pure(self):
        text = "Committed the parser rewrite"
        assert classify(text) == classify(text) == Category.DEVELOPMENT

    def test_rules_cover_every_category_except_other(self):
        assert {category for category, _ in CATEGORY_RULES} == set(Category) - {Category.OTHER}


class TestGate:
    def test_action_word_passes(self):
        assert passes_gate("Shipped v2!")

    def test_no_action_word_fails(self):
        assert not passes_gate("Lunch with the team")

    def test_whole_words_only(self):
        assert not passes_gate("unshipped changes")

    def test_empty(self):
        assert not passes_gate("")

    def test_vocabulary_is_lowercase(self):
        assert all(word == word.lower() for word in ACTION_VOCABULARY)
