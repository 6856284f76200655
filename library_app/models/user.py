from library_app.extensions import db
from library_app.utils.clock import utcnow


class Role:
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(30), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.MEMBER)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    borrow_records = db.relationship("BorrowRecord", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
