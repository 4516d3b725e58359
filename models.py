# models.py
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class LocalStorageItem(db.Model):
    """One row per storage key; the value is an opaque serialized string."""

    __tablename__ = "local_storage"
    key = db.Column(db.String(200), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
