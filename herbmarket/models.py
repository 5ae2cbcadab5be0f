from herbmarket.extensions import db
from flask_login import UserMixin
from datetime import datetime
import enum


class UserRole(enum.Enum):
    BUYER = 'buyer'
    SELLER = 'seller'
    ADMIN = 'admin'


class AuditStatus(enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class StockStatus(enum.Enum):
    IN_STOCK = 'in_stock'
    OUT_OF_STOCK = 'out_of_stock'


class OrderStatus(enum.Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    SHIPPED = 'shipped'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'


class ProcessingStatus(enum.Enum):
    REQUESTED = 'requested'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class GroupBuyStatus(enum.Enum):
    ACTIVE = 'active'
    COMPLETED = 'completed'
    EXPIRED = 'expired'


class BuyingRequestStatus(enum.Enum):
    PENDING = 'pending'
    ADMIN_APPROVED = 'admin_approved'
    SENT_TO_SELLER = 'sent_to_seller'
    SELLER_RESPONDED = 'seller_responded'
    COMPLETED = 'completed'
    REJECTED = 'rejected'


class SellerResponseStatus(enum.Enum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


class ReviewStatus(enum.Enum):
    PENDING_REVIEW = 'pending_review'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    NEEDS_REVISION = 'needs_revision'


class StoredValue(db.Model):
    """One key of the demo key-value namespace."""

    __tablename__ = 'stored_values'

    key = db.Column(db.String(128), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False)

    def __repr__(self):
        return f'<StoredValue {self.key}>'


class SessionUser(UserMixin):
    """Flask-Login wrapper around a demo user record."""

    def __init__(self, record):
        self.record = dict(record)
        self.id = record['id']
        self.email = record.get('email') or record['id']
        self.business_name = record.get('business_name')
        self.role = UserRole(record['role'])

    def __repr__(self):
        return f'<SessionUser {self.id} role={self.role.value}>'
