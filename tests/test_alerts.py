from datetime import date

import pytest

from pharmastock.extensions import db
from pharmastock.models import AlertReadMarker
from pharmastock.services.alert_service import (
    build_alerts,
    clear_read_markers,
    mark_alerts_read,
    read_alert_keys,
    unread_alerts,
)
from pharmastock.services.errors import ValidationError

TODAY = date(2026, 3, 15)


@pytest.fixture
def alerting_lots(make_lot):
    return [
        make_lot(id=1, designation='zinc sulfate', current_stock=2, low_stock_threshold=10,
                 expiry_date=date(2026, 4, 10)),
        make_lot(id=2, designation='Amoxicillin', current_stock=50, expiry_date=date(2026, 1, 1)),
        make_lot(id=3, designation='Bisoprolol', current_stock=0, expiry_date=date(2028, 1, 1)),
        make_lot(id=4, designation='Aspirin', current_stock=20, expiry_date=None),
    ]


class TestBuildAlerts:

    def test_keys_priorities_and_order(self, alerting_lots):
        alerts = build_alerts(alerting_lots, TODAY)
        assert [(a['key'], a['priority']) for a in alerts] == [
            ('expired:2', 'CRITICAL'),
            ('a_commander:3', 'CRITICAL'),
            ('nearing_expiry:1', 'HIGH'),
            ('low_stock:1', 'HIGH'),
        ]

    def test_messages_mention_lot_details(self, alerting_lots):
        by_key = {alert['key']: alert for alert in build_alerts(alerting_lots, TODAY)}
        assert by_key['expired:2']['message'] == 'Amoxicillin expired on 2026-01-01'
        assert '2 left, threshold 10' in by_key['low_stock:1']['message']
        assert by_key['a_commander:3']['title'] == 'Out of stock'
        assert by_key['a_commander:3']['barcode'] == '3400000000001'

    def test_healthy_and_overstocked_lots_raise_nothing(self, make_lot):
        lots = [make_lot(current_stock=20), make_lot(id=2, current_stock=500)]
        assert build_alerts(lots, TODAY) == []

    def test_unread_filter(self, alerting_lots):
        alerts = build_alerts(alerting_lots, TODAY)
        remaining = unread_alerts(alerts, {'expired:2', 'low_stock:1', 'unknown:7'})
        assert [alert['key'] for alert in remaining] == ['a_commander:3', 'nearing_expiry:1']


class TestReadMarkers:

    def test_mark_is_idempotent(self, db_session, test_user):
        assert mark_alerts_read(test_user.id, ['expired:2', ' expired:2 ', 'low_stock:1']) == 2
        assert mark_alerts_read(test_user.id, 'expired:2') == 0
        assert read_alert_keys(test_user.id) == {'expired:2', 'low_stock:1'}

    def test_empty_keys_are_rejected(self, db_session, test_user):
        with pytest.raises(ValidationError) as exc_info:
            mark_alerts_read(test_user.id, ['', None])
        assert exc_info.value.field == 'keys'

    def test_clear_only_touches_the_given_user(self, db_session, test_user):
        from pharmastock.models import User

        other = User(username='other', email='other@example.com')
        other.set_password('secret')
        db.session.add(other)
        db.session.commit()

        mark_alerts_read(test_user.id, ['expired:1', 'expired:2'])
        mark_alerts_read(other.id, ['expired:1'])

        assert clear_read_markers(test_user.id) == 2
        assert read_alert_keys(test_user.id) == set()
        assert db.session.scalar(db.select(db.func.count(AlertReadMarker.id))) == 1
