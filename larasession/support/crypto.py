"""
Crypto - Centralized cryptography operations
Provides session identifier generation and signed cookie payloads
"""
import secrets
import string
from itsdangerous import URLSafeSerializer, BadData

# 64-symbol URL-safe alphabet (same symbol set as base64url)
URL_SAFE_ALPHABET = string.ascii_letters + string.digits + '-_'


class Crypto:
    """Centralized cryptography helper"""

    # === Random Token Generation ===

    @staticmethod
    def generate_session_id(length: int = None) -> str:
        """
        Generate a URL-safe random session identifier

        Every character is drawn from a 64-symbol alphabet with the
        secrets module, so a 21 character id carries 126 bits of entropy.

        Args:
            length: Number of characters (default: DEFAULT_SESSION_ID_LENGTH)

        Returns:
            URL-safe random string of exactly `length` characters
        """
        if length is None:
            from larasession.defaults import DEFAULT_SESSION_ID_LENGTH
            length = DEFAULT_SESSION_ID_LENGTH

        if length <= 0:
            raise ValueError("Session id length must be positive")

        return ''.join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length))

    @staticmethod
    def generate_secret(length: int = 32) -> str:
        """
        Generate random hex secret

        Args:
            length: Length of secret in bytes (default: 32)

        Returns:
            Random hex string
        """
        return secrets.token_hex(length)

    # === Signed Data (itsdangerous) ===

    @staticmethod
    def create_serializer(secret_key: str, salt: str = 'larasession.cookie') -> URLSafeSerializer:
        """
        Create URL-safe signing serializer

        Args:
            secret_key: Secret key for signing
            salt: Namespace for the signature

        Returns:
            URLSafeSerializer instance
        """
        if not secret_key:
            raise ValueError("A secret key is required to sign session payloads")

        return URLSafeSerializer(secret_key, salt=salt)

    @staticmethod
    def verify_signed_data(signed_data: str, serializer: URLSafeSerializer):
        """
        Verify and extract signed data

        Args:
            signed_data: Signed data string
            serializer: Serializer created with create_serializer()

        Returns:
            Original data if valid, None otherwise
        """
        try:
            return serializer.loads(signed_data)
        except BadData:
            return None
