from typing import Any, Protocol
import base64
import json
import os

import yaml


class Serializer(Protocol):
    """Serialize/deserialize plain Python values (dicts, lists, scalars).

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    Output must be valid UTF-8 because payloads are stored as strings.
    """

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class JSONSerializer:
    """Serializer using JSON (text). Caller must ensure values are JSON-serializable."""

    def dump(self, value: Any) -> bytes:
        return json.dumps(value).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """Serializer using YAML (text). Caller must ensure values are YAML-serializable."""

    def dump(self, value: Any) -> bytes:
        return yaml.safe_dump(value, sort_keys=False).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class EncryptedSerializer:
    """Serializer that encrypts payloads using Fernet (symmetric, authenticated).

    Notes:
    - The frame is JSON text, so encrypted payloads can still be stored
      in string-valued keys.
    - For passphrase-derived keys a random salt is generated per payload
      and stored in the frame together with the PBKDF2 iteration count.
    - Key rotation is out of scope; a single key or password is used.
    """

    def __init__(
        self,
        *,
        key: bytes | None = None,
        password: str | None = None,
        iterations: int = 390000,
        base_serializer: Serializer | None = None,
    ) -> None:
        if key is None and password is None:
            raise ValueError("EncryptedSerializer requires either `key` or `password`")
        self._key = key
        self._password = password
        self._iterations = iterations
        self.base_serializer = base_serializer or JSONSerializer()

    def _derive_key(self, password: str, salt: bytes, iterations: int) -> bytes:
        from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
        from cryptography.hazmat.primitives import hashes

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))

    def dump(self, value: Any) -> bytes:
        from cryptography.fernet import Fernet

        inner = self.base_serializer.dump(value)
        if self._password is not None:
            salt = os.urandom(16)
            key = self._derive_key(self._password, salt, self._iterations)
            frame = {
                "v": 1,
                "mode": "password",
                "kdf": "pbkdf2",
                "iterations": self._iterations,
                "salt": base64.urlsafe_b64encode(salt).decode("ascii"),
                # Fernet tokens are already urlsafe base64
                "ct": Fernet(key).encrypt(inner).decode("ascii"),
            }
        else:
            frame = {"v": 1, "mode": "key", "ct": Fernet(self._key).encrypt(inner).decode("ascii")}
        return json.dumps(frame).encode("utf-8")

    def load(self, data: bytes) -> Any:
        from cryptography.fernet import Fernet

        frame = json.loads(data.decode("utf-8"))
        mode = frame.get("mode")
        token = frame["ct"].encode("ascii")
        if mode == "password":
            if self._password is None:
                raise ValueError("serializer was not configured with a password")
            salt = base64.urlsafe_b64decode(frame["salt"].encode("ascii"))
            key = self._derive_key(self._password, salt, frame.get("iterations", self._iterations))
            return self.base_serializer.load(Fernet(key).decrypt(token))
        if mode == "key":
            if self._key is None:
                raise ValueError("serializer was not configured with a key")
            return self.base_serializer.load(Fernet(self._key).decrypt(token))
        raise ValueError("unknown frame format")


def get_serializer(name: str, **options) -> Serializer:
    """Return a serializer by name: 'json', 'yaml' or 'encrypted'."""
    name = (name or "json").lower()
    if name == "json":
        return JSONSerializer()
    if name == "yaml":
        return YAMLSerializer()
    if name == "encrypted":
        return EncryptedSerializer(**options)
    raise ValueError(f"unknown serializer {name!r}")
