"""
Signup and login against the "auth" collection.

Passwords are stored only as bcrypt hashes. Login does not issue a session
or token, it only acknowledges that the pair matched.
"""
import logging

from passlib.context import CryptContext
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from errors import Conflict, InvalidCredentials

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

AUTH_COLLECTION = "auth"


def signup(db: Database, username: str, password: str) -> None:
    password_hash = pwd_context.hash(password)
    try:
        db[AUTH_COLLECTION].insert_one({"username": username, "password": password_hash})
    except DuplicateKeyError:
        raise Conflict("User already exists")
    logger.info("Created credentials for %s", username)


def login(db: Database, username: str, password: str) -> None:
    doc = db[AUTH_COLLECTION].find_one({"username": username})
    # same error for unknown user and wrong password
    if not doc or not pwd_context.verify(password, doc.get("password", "")):
        logger.info("Failed login attempt for %s", username)
        raise InvalidCredentials()
