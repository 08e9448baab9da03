"""Persistence of the encrypted artifact.

Layout: the IV as lowercase hex followed by a newline, then the raw
ciphertext bytes.
"""

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..exceptions import ArtifactReadError, OutputWriteError
from .encryptor import IV_SIZE, EncryptedPayload

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def write_artifact(path: PathLike, payload: EncryptedPayload) -> Path:
    """Write the artifact atomically.

    Data goes to a temporary file in the target directory which is then
    renamed into place, so a failed write never leaves a partial artifact.

    Returns:
        The path written

    Raises:
        OutputWriteError: If the artifact cannot be written
    """
    target = Path(path)
    tmp_path: Optional[Path] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=target.parent, prefix=f".{target.name}.", suffix=".tmp", delete=False
        ) as tf:
            tmp_path = Path(tf.name)
            tf.write(payload.iv.hex().encode("ascii") + b"\n")
            tf.write(payload.ciphertext)
            tf.flush()
            os.fsync(tf.fileno())
        tmp_path.replace(target)
    except OSError as e:
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
        raise OutputWriteError(f"Failed to write {target}: {e}") from e

    logger.debug("Wrote %d ciphertext bytes to %s", len(payload.ciphertext), target)
    return target


def read_artifact(path: PathLike) -> EncryptedPayload:
    """Read an artifact written by :func:`write_artifact`.

    Raises:
        ArtifactReadError: If the file is missing or malformed
    """
    source = Path(path)
    try:
        data = source.read_bytes()
    except OSError as e:
        raise ArtifactReadError(f"Failed to read {source}: {e}") from e

    iv_hex, sep, ciphertext = data.partition(b"\n")
    if not sep:
        raise ArtifactReadError(f"{source} has no IV line")
    try:
        iv = bytes.fromhex(iv_hex.decode("ascii"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ArtifactReadError(f"{source} has a malformed IV line") from e
    if len(iv) != IV_SIZE:
        raise ArtifactReadError(f"{source} IV is {len(iv)} bytes; expected {IV_SIZE}")

    return EncryptedPayload(iv=iv, ciphertext=ciphertext)
