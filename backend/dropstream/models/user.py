from werkzeug.security import generate_password_hash, check_password_hash
from dropstream.extensions import db
from .base import BaseModel

class User(BaseModel):
    __tablename__ = 'users'

    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(120), nullable=False, default="")
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    avatar_url = db.Column(db.String(512), nullable=True)

    platform_role = db.Column(db.String(20), nullable=False, default='user', index=True)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)
