from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils


class AlertReadMarker(db.Model):
    """Per-user record that an inventory alert has been seen."""
    __tablename__ = 'alert_read_marker'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    alert_key = db.Column(db.String(128), nullable=False)
    read_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'alert_key', name='uq_alert_read_marker_user_key'),
    )

    def __repr__(self):
        return f'<AlertReadMarker user={self.user_id} key={self.alert_key}>'
