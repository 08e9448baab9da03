"""Output stage: serialization, encryption and persistence of the calendar."""

from .encryptor import EncryptedPayload, Encryptor
from .serializer import deserialize, serialize
from .sink import read_artifact, write_artifact

__all__ = [
    "EncryptedPayload",
    "Encryptor",
    "deserialize",
    "read_artifact",
    "serialize",
    "write_artifact",
]
