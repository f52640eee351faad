from datetime import date

import pytest

from pharmastock.services.status_classifier import (
    ClassificationPolicy,
    StatusTag,
    classify,
    nearing_expiry_limit,
    status_labels,
)

TODAY = date(2026, 3, 15)


class TestStockLevelTags:

    def test_healthy_lot_is_in_stock_only(self, make_lot):
        lot = make_lot(current_stock=20, low_stock_threshold=10, expiry_date=date(2027, 1, 1))
        assert classify(lot, TODAY) == (StatusTag.IN_STOCK,)

    def test_below_threshold_without_expiry_is_low_stock(self, make_lot):
        lot = make_lot(current_stock=5, low_stock_threshold=10, expiry_date=None)
        assert classify(lot, TODAY) == (StatusTag.LOW_STOCK,)

    def test_empty_lot_is_to_reorder(self, make_lot):
        lot = make_lot(current_stock=0, low_stock_threshold=10, expiry_date=date(2027, 1, 1))
        assert classify(lot, TODAY) == (StatusTag.TO_REORDER,)

    def test_more_than_three_times_threshold_is_overstock(self, make_lot):
        lot = make_lot(current_stock=40, low_stock_threshold=10, expiry_date=date(2027, 1, 1))
        assert classify(lot, TODAY) == (StatusTag.OVERSTOCK,)

    def test_exactly_three_times_threshold_is_not_overstock(self, make_lot):
        lot = make_lot(current_stock=30, low_stock_threshold=10, expiry_date=date(2027, 1, 1))
        assert classify(lot, TODAY) == (StatusTag.IN_STOCK,)

    def test_zero_threshold_never_overstocks(self, make_lot):
        lot = make_lot(current_stock=1000, low_stock_threshold=0, expiry_date=None)
        assert classify(lot, TODAY) == (StatusTag.IN_STOCK,)

    def test_stock_equal_to_threshold_is_not_low(self, make_lot):
        lot = make_lot(current_stock=10, low_stock_threshold=10, expiry_date=None)
        assert classify(lot, TODAY) == (StatusTag.IN_STOCK,)

    def test_zero_threshold_and_zero_stock_is_to_reorder(self, make_lot):
        lot = make_lot(current_stock=0, low_stock_threshold=0, expiry_date=None)
        assert classify(lot, TODAY) == (StatusTag.TO_REORDER,)


class TestExpiryTags:

    def test_yesterday_is_expired(self, make_lot):
        lot = make_lot(expiry_date=date(2026, 3, 14), current_stock=20)
        assert classify(lot, TODAY) == (StatusTag.EXPIRED,)

    def test_today_is_nearing_not_expired(self, make_lot):
        lot = make_lot(expiry_date=TODAY, current_stock=20)
        assert classify(lot, TODAY) == (StatusTag.NEARING_EXPIRY,)

    def test_window_end_is_inclusive(self, make_lot):
        lot = make_lot(expiry_date=date(2026, 6, 15), current_stock=20)
        assert classify(lot, TODAY) == (StatusTag.NEARING_EXPIRY,)

    def test_day_after_window_is_not_nearing(self, make_lot):
        lot = make_lot(expiry_date=date(2026, 6, 16), current_stock=20)
        assert classify(lot, TODAY) == (StatusTag.IN_STOCK,)

    def test_not_applicable_expiry_never_expires(self, make_lot):
        lot = make_lot(expiry_date=None, current_stock=20)
        assert StatusTag.EXPIRED not in classify(lot, date(2100, 1, 1))

    def test_window_clamps_to_month_end(self):
        assert nearing_expiry_limit(date(2025, 11, 30), 3) == date(2026, 2, 28)
        assert nearing_expiry_limit(date(2027, 11, 30), 3) == date(2028, 2, 29)

    def test_datetime_expiry_compares_by_date(self, make_lot):
        from datetime import datetime
        lot = make_lot(expiry_date=datetime(2026, 3, 15, 23, 59), current_stock=20)
        assert classify(lot, TODAY) == (StatusTag.NEARING_EXPIRY,)


class TestCombinedTags:

    def test_nearing_and_low_stock_keep_expiry_first(self, make_lot):
        lot = make_lot(expiry_date=date(2026, 4, 1), current_stock=3, low_stock_threshold=10)
        assert classify(lot, TODAY) == (StatusTag.NEARING_EXPIRY, StatusTag.LOW_STOCK)

    @pytest.mark.parametrize('stock', [0, 3, 100])
    def test_expired_suppresses_stock_tags_by_default(self, make_lot, stock):
        lot = make_lot(expiry_date=date(2025, 1, 1), current_stock=stock, low_stock_threshold=10)
        assert classify(lot, TODAY) == (StatusTag.EXPIRED,)

    def test_expired_keeps_stock_tags_when_policy_allows(self, make_lot):
        policy = ClassificationPolicy(expired_suppresses_stock_tags=False)
        lot = make_lot(expiry_date=date(2025, 1, 1), current_stock=0, low_stock_threshold=10)
        assert classify(lot, TODAY, policy) == (StatusTag.EXPIRED, StatusTag.TO_REORDER)

    def test_expired_is_never_also_nearing(self, make_lot):
        lot = make_lot(expiry_date=date(2026, 3, 1), current_stock=20)
        tags = classify(lot, TODAY)
        assert StatusTag.EXPIRED in tags
        assert StatusTag.NEARING_EXPIRY not in tags


class TestPolicyFromConfig:

    def test_reads_configured_values(self):
        policy = ClassificationPolicy.from_config({
            'NEARING_EXPIRY_MONTHS': 6,
            'OVERSTOCK_FACTOR': 5,
            'EXPIRED_SUPPRESSES_STOCK_TAGS': False,
        })
        assert policy == ClassificationPolicy(6, 5, False)

    def test_defaults_when_missing(self):
        assert ClassificationPolicy.from_config({}) == ClassificationPolicy()

    def test_labels_follow_tag_order(self):
        assert status_labels((StatusTag.NEARING_EXPIRY, StatusTag.LOW_STOCK)) == ['Nearing expiry', 'Low stock']
