from werkzeug.security import generate_password_hash, check_password_hash

def hash_password(raw_password: str, method: str = "pbkdf2:sha256:600000") -> str:
    return generate_password_hash(raw_password, method=method)

def verify_password(raw_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, raw_password)
