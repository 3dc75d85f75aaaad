# lending/passwords.py
from werkzeug.security import generate_password_hash, check_password_hash


def hash_password(password: str) -> str:
    """Salted hash for storage; the plain password is never kept"""
    return generate_password_hash(password)


def verify_password(password: str, stored: str) -> bool:
    if not stored:
        return False
    return check_password_hash(stored, password)
