"""Promote an existing account to the admin role: python scripts/make_admin.py <username>"""
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gramcheck import create_app
from gramcheck.extensions import db
from gramcheck.models import User


def promote(username):
    user = User.query.filter_by(username=username).first()
    if not user:
        print(f"No user named {username!r}")
        return False
    user.role = 'admin'
    db.session.commit()
    print(f"User {username!r} promoted to admin")
    return True


if __name__ == '__main__':
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    app = create_app()
    with app.app_context():
        sys.exit(0 if promote(sys.argv[1]) else 1)
