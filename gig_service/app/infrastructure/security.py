import datetime
import secrets
from typing import Optional

import jwt  # Import PyJWT
from jwt import ExpiredSignatureError, InvalidTokenError


class SecurityService:
    """
    Verifies bearer tokens issued by the identity provider.

    Sign-in itself happens at the provider; this service only needs the
    shared secret to trust the token's subject (the user's uid).
    """

    def __init__(self, config):
        self.config = config

    def create_access_token(
        self, user_id: str, expires_delta: Optional[datetime.timedelta] = None
    ):
        expire = datetime.datetime.now(datetime.timezone.utc) + (
            expires_delta or datetime.timedelta(minutes=15)
        )
        to_encode = {"sub": user_id, "nonce": secrets.token_hex(8), "exp": expire}
        encoded_jwt = jwt.encode(
            to_encode, self.config.SECRET_KEY, algorithm=self.config.ALGORITHM
        )
        return encoded_jwt, expire

    def decode_access_token(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(
                token, self.config.SECRET_KEY, algorithms=[self.config.ALGORITHM]
            )
        except (ExpiredSignatureError, InvalidTokenError):
            return None
        user_id = payload.get("sub")
        if not user_id:
            return None
        return user_id
