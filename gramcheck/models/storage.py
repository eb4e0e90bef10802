"""
Storage Entry Model
"""

from datetime import datetime
from gramcheck.extensions import db


class StorageEntry(db.Model):
    """One key of a browser profile's persistent key-value store"""
    __tablename__ = 'storage_entries'
    
    namespace = db.Column(db.String(64), primary_key=True)
    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    def __repr__(self):
        return f'<StorageEntry {self.namespace}:{self.key}>'
