from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


def _bcrypt_secret(password: str) -> bytes:
    """
    The bytes bcrypt actually sees: UTF-8, cut at 72 bytes.

    Registration, login and change-password all go through here, so a
    password longer than the limit keeps working the same way everywhere.
    """
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Checks a login or current-password attempt against a stored user hash.
    An empty attempt or a missing hash never matches.
    """
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(_bcrypt_secret(plain_password), hashed_password)


def get_password_hash(password: str) -> str:
    """
    Salted bcrypt hash stored as User.hashed_password; never the plaintext.
    """
    return pwd_context.hash(_bcrypt_secret(password))


def needs_rehash(hashed_password: str) -> bool:
    return pwd_context.needs_update(hashed_password)
