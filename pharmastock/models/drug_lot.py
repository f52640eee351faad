from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils

# Rendered in place of a NULL expiry_date.
NOT_APPLICABLE_EXPIRY = 'N/A'


class DrugLot(db.Model):
    """
    One physical batch of a drug held by the pharmacy.
    Several lots may share a barcode (same product, different batch number or expiry).
    """
    __tablename__ = 'drug_lot'

    id = db.Column(db.Integer, primary_key=True)
    barcode = db.Column(db.String(64), nullable=False, index=True)
    lot_number = db.Column(db.String(64), nullable=True)

    designation = db.Column(db.String(255), nullable=False, index=True)
    category = db.Column(db.String(128), nullable=True, index=True)

    initial_stock = db.Column(db.Integer, nullable=True)
    current_stock = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=0)

    # NULL means the product has no expiry ("N/A")
    expiry_date = db.Column(db.Date, nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now, nullable=True)
    updated_at = db.Column(db.DateTime, default=TimezoneUtils.utc_now, onupdate=TimezoneUtils.utc_now, nullable=True)

    # Optimistic concurrency counter, bumped on every UPDATE
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {'version_id_col': version_id}

    __table_args__ = (
        db.CheckConstraint('current_stock >= 0', name='check_current_stock_non_negative'),
        db.CheckConstraint('low_stock_threshold >= 0', name='check_low_stock_threshold_non_negative'),
        db.UniqueConstraint('barcode', 'lot_number', name='uq_drug_lot_barcode_lot_number'),
        # NULLs are distinct to the constraint above, so at most one unnumbered lot per barcode
        db.Index(
            'uq_drug_lot_barcode_without_lot_number',
            'barcode',
            unique=True,
            sqlite_where=db.text('lot_number IS NULL'),
            postgresql_where=db.text('lot_number IS NULL'),
        ),
        db.Index('ix_drug_lot_updated_at', 'updated_at'),
    )

    def __repr__(self):
        return f'<DrugLot {self.id}: {self.designation} [{self.barcode}/{self.lot_number}] {self.current_stock}>'

    @property
    def has_expiry(self) -> bool:
        return self.expiry_date is not None

    @property
    def expiry_display(self) -> str:
        if self.expiry_date is None:
            return NOT_APPLICABLE_EXPIRY
        return self.expiry_date.isoformat()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'barcode': self.barcode,
            'lot_number': self.lot_number,
            'designation': self.designation,
            'category': self.category,
            'initial_stock': self.initial_stock,
            'current_stock': self.current_stock,
            'low_stock_threshold': self.low_stock_threshold,
            'expiry_date': self.expiry_display,
            'created_at': TimezoneUtils.format_datetime_for_api(self.created_at),
            'updated_at': TimezoneUtils.format_datetime_for_api(self.updated_at),
        }
