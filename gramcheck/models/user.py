"""
User Model
"""

from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from gramcheck.extensions import db


class User(UserMixin, db.Model):
    """Account that can log in to the grammar checker or the admin panel"""
    __tablename__ = 'users'
    
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(30), default='')
    full_name = db.Column(db.String(120))
    # 'admin' or 'user'
    role = db.Column(db.String(20), default='user', nullable=False)
    account_type = db.Column(db.String(20), default='free', nullable=False)
    status = db.Column(db.String(20), default='active', nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    @property
    def is_admin(self):
        return self.role == 'admin'
    
    @property
    def is_active(self):
        return self.status == 'active'
    
    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')
    
    def check_password(self, password):
        return check_password_hash(self.password_hash, password)
    
    def login_response(self):
        """Payload returned by a successful login."""
        return {
            'userId': self.id,
            'username': self.username,
            'email': self.email,
            'phone': self.phone or '',
            'userRole': self.role,
            'fullName': self.full_name,
        }
    
    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'phone': self.phone or '',
            'fullName': self.full_name,
            'role': self.role,
            'accountType': self.account_type,
            'status': self.status,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
    
    def __repr__(self):
        return f'<User {self.username}>'
