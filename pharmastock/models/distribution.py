from sqlalchemy import event

from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils


class ImmutableLedgerError(RuntimeError):
    """Raised when code tries to rewrite or remove a distribution ledger entry."""


class Distribution(db.Model):
    """
    Ledger entry for stock leaving the pharmacy towards a hospital service.

    Item and service names are copied at write time so the entry stays readable
    after the lot or the service is gone. ``service_id`` deliberately carries no
    foreign key for the same reason.
    """
    __tablename__ = 'distribution'

    id = db.Column(db.Integer, primary_key=True)
    drug_lot_id = db.Column(db.Integer, db.ForeignKey('drug_lot.id', ondelete='SET NULL'), nullable=True, index=True)
    barcode = db.Column(db.String(64), nullable=False, index=True)
    item_name = db.Column(db.String(255), nullable=False)
    lot_number = db.Column(db.String(64), nullable=True)
    quantity_distributed = db.Column(db.Integer, nullable=False)

    service_id = db.Column(db.Integer, nullable=True, index=True)
    service_name = db.Column(db.String(128), nullable=False)

    date = db.Column(db.DateTime, default=TimezoneUtils.utc_now, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)

    drug_lot = db.relationship('DrugLot', passive_deletes=True)
    user = db.relationship('User')

    __table_args__ = (
        db.CheckConstraint('quantity_distributed > 0', name='check_quantity_distributed_positive'),
    )

    def __repr__(self):
        return f'<Distribution {self.id}: {self.quantity_distributed} x {self.item_name} -> {self.service_name}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'drug_lot_id': self.drug_lot_id,
            'barcode': self.barcode,
            'item_name': self.item_name,
            'lot_number': self.lot_number,
            'quantity_distributed': self.quantity_distributed,
            'service_id': self.service_id,
            'service_name': self.service_name,
            'date': TimezoneUtils.format_datetime_for_api(self.date),
            'user_id': self.user_id,
        }


@event.listens_for(Distribution, 'before_update')
def _reject_distribution_update(mapper, connection, target):
    raise ImmutableLedgerError(f'Distribution {target.id} is immutable and cannot be updated')


@event.listens_for(Distribution, 'before_delete')
def _reject_distribution_delete(mapper, connection, target):
    raise ImmutableLedgerError(f'Distribution {target.id} is immutable and cannot be deleted')
