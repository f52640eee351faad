from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils


class Service(db.Model):
    """Hospital department that receives distributed stock."""
    __tablename__ = 'service'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now, nullable=False)

    def __repr__(self):
        return f'<Service {self.id}: {self.name}>'

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name}
