"""
Unit tests for listing filters and sorting
"""

import itertools
import unittest
import sys
import os
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from factories import NOW, make_tool
from schemas.domain import FreeTier, Freshness, PricingModel, SortOption, StoreSort, ToolFilters
from services.tool_filters import apply_filters, freshness_cutoff, normalize_sort, sort_tools


class TestToolFilters(unittest.TestCase):
    """Test cases for the client-side filter pass"""

    def setUp(self):
        self.truly_free = make_tool(
            "remove-bg",
            model=PricingModel.FREE,
            free_tier=FreeTier(exists=True, commercial_use=True),
        )
        self.watermarked = make_tool(
            "craiyon",
            model=PricingModel.FREE,
            free_tier=FreeTier(exists=True, watermark=True),
        )
        self.needs_card = make_tool(
            "carded",
            model=PricingModel.FREEMIUM,
            free_tier=FreeTier(exists=True, requires_card=True, requires_signup=True, commercial_use=True),
        )
        self.paid = make_tool("paid-only", category="Code Generation", model=PricingModel.PAID)
        self.tools = [self.truly_free, self.watermarked, self.needs_card, self.paid]

    def test_default_filters_keep_everything(self):
        self.assertEqual(apply_filters(self.tools, ToolFilters(), NOW), self.tools)

    def test_truly_free_requires_free_tier_without_card_or_watermark(self):
        result = apply_filters(self.tools, ToolFilters(truly_free=True), NOW)
        self.assertEqual([t.id for t in result], ["remove-bg"])

    def test_flags_are_ignored_without_free_tier(self):
        tool = make_tool("x", free_tier=FreeTier(exists=False, watermark=True, requires_card=True))
        self.assertFalse(tool.pricing.free_tier.watermark)
        self.assertFalse(tool.pricing.is_truly_free)

    def test_no_signup_and_commercial_use(self):
        no_signup = apply_filters(self.tools, ToolFilters(no_signup=True), NOW)
        self.assertNotIn(self.needs_card, no_signup)

        commercial = apply_filters(self.tools, ToolFilters(commercial_use=True), NOW)
        self.assertEqual([t.id for t in commercial], ["remove-bg", "carded"])

    def test_pricing_models_and_categories(self):
        filters = ToolFilters(pricing_models=[PricingModel.PAID, PricingModel.FREEMIUM])
        self.assertEqual([t.id for t in apply_filters(self.tools, filters, NOW)], ["carded", "paid-only"])

        filters = ToolFilters(categories=["Code Generation"])
        self.assertEqual([t.id for t in apply_filters(self.tools, filters, NOW)], ["paid-only"])

    def test_freshness_window(self):
        fresh = make_tool("fresh", first_seen_at=NOW - timedelta(hours=2))
        week_old = make_tool("week-old", first_seen_at=NOW - timedelta(days=6))
        old = make_tool("old", first_seen_at=NOW - timedelta(days=45))
        tools = [fresh, week_old, old]

        self.assertEqual(len(apply_filters(tools, ToolFilters(freshness=Freshness.DAY), NOW)), 1)
        self.assertEqual(len(apply_filters(tools, ToolFilters(freshness=Freshness.WEEK), NOW)), 2)
        self.assertEqual(len(apply_filters(tools, ToolFilters(freshness=Freshness.MONTH), NOW)), 2)
        self.assertEqual(len(apply_filters(tools, ToolFilters(freshness=Freshness.ALL), NOW)), 3)
        self.assertIsNone(freshness_cutoff(Freshness.ALL, NOW))

    def test_combined_filters_return_subset_meeting_every_predicate(self):
        tools = self.tools + [
            make_tool(
                "fresh-coder",
                category="Code Generation",
                model=PricingModel.FREE,
                first_seen_at=NOW - timedelta(days=2),
                free_tier=FreeTier(exists=True, commercial_use=True),
            ),
            make_tool(
                "fresh-signup",
                category="Code Generation",
                first_seen_at=NOW - timedelta(days=1),
                free_tier=FreeTier(exists=True, requires_signup=True),
            ),
            make_tool("old-trial", category="Productivity", model=PricingModel.TRIAL_ONLY,
                      first_seen_at=NOW - timedelta(days=90)),
        ]
        pricing_sets = [[], [PricingModel.FREE], [PricingModel.FREEMIUM, PricingModel.PAID]]
        category_sets = [[], ["Code Generation"], ["Image Generation", "Productivity"]]
        cutoff = NOW - timedelta(days=7)

        for truly_free, no_signup, commercial_use, models, categories, freshness in itertools.product(
            (False, True), (False, True), (False, True),
            pricing_sets, category_sets, (Freshness.ALL, Freshness.WEEK),
        ):
            filters = ToolFilters(
                truly_free=truly_free,
                no_signup=no_signup,
                commercial_use=commercial_use,
                pricing_models=models,
                categories=categories,
                freshness=freshness,
            )
            with self.subTest(filters=filters):
                result = apply_filters(tools, filters, NOW)
                self.assertTrue(all(tool in tools for tool in result))

                expected = []
                for tool in tools:
                    tier = tool.pricing.free_tier
                    if truly_free and not (tier.exists and not tier.requires_card and not tier.watermark):
                        continue
                    if no_signup and tier.requires_signup:
                        continue
                    if commercial_use and not tier.commercial_use:
                        continue
                    if models and tool.pricing.model not in models:
                        continue
                    if categories and tool.category.value not in categories:
                        continue
                    if freshness is Freshness.WEEK and tool.first_seen_at < cutoff:
                        continue
                    expected.append(tool)

                self.assertEqual([t.id for t in result], [t.id for t in expected])


class TestSorting(unittest.TestCase):
    """Test cases for sort options"""

    def test_sorts_descending_on_single_key(self):
        a = make_tool("a", trend_score=10, mention_count=5, first_seen_at=NOW - timedelta(days=3))
        b = make_tool("b", trend_score=90, mention_count=1, first_seen_at=NOW - timedelta(days=9))
        c = make_tool("c", trend_score=50, mention_count=50, first_seen_at=NOW - timedelta(days=1))

        self.assertEqual([t.id for t in sort_tools([a, b, c], SortOption.RISING)], ["b", "c", "a"])
        self.assertEqual([t.id for t in sort_tools([a, b, c], SortOption.RECENT)], ["c", "a", "b"])
        self.assertEqual([t.id for t in sort_tools([a, b, c], SortOption.ESTABLISHED)], ["c", "a", "b"])

    def test_recent_orders_by_first_seen_newest_first(self):
        jan = make_tool("jan", first_seen_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        jun = make_tool("jun", first_seen_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        dec = make_tool("dec", first_seen_at=datetime(2023, 12, 1, tzinfo=timezone.utc))

        result = sort_tools([jan, jun, dec], SortOption.RECENT)

        self.assertEqual(
            [t.first_seen_at.date().isoformat() for t in result],
            ["2024-06-01", "2024-01-01", "2023-12-01"],
        )

    def test_ties_keep_input_order(self):
        tools = [make_tool(f"t{i}", trend_score=40) for i in range(5)]
        self.assertEqual(sort_tools(tools, SortOption.RISING), tools)

    def test_normalize_sort_accepts_both_vocabularies(self):
        self.assertEqual(normalize_sort("rising"), SortOption.RISING)
        self.assertEqual(normalize_sort("trending"), SortOption.RISING)
        self.assertEqual(normalize_sort("freshness"), SortOption.RECENT)
        self.assertEqual(normalize_sort(StoreSort.MENTIONS), SortOption.ESTABLISHED)
        with self.assertRaises(ValueError):
            normalize_sort("popular")


if __name__ == '__main__':
    unittest.main()
