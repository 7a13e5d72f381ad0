# -*- coding: utf-8 -*-
"""Content fingerprint stored in the hash_id label of a materialized secret."""

import hashlib
import struct

HASH_LABEL = "hash_id"
APP_LABEL = "app"


def _fold(hasher, data):
    # length prefix keeps ("ab", "c") and ("a", "bc") apart
    hasher.update(struct.pack(">Q", len(data)))
    hasher.update(data)


def fingerprint(data):
    """Return an unsigned 64 bit hash of the key/value pairs of data.

    Keys are sorted first so the result only depends on content, never on insertion
    order. This is content addressing, not a security control.

    Args:
        data (dict): Secret key to bytes.

    Returns:
        int: The fingerprint.
    """
    hasher = hashlib.blake2b(digest_size=8)
    for key in sorted(data):
        value = data[key]
        if isinstance(value, str):
            value = value.encode("utf-8")
        _fold(hasher, key.encode("utf-8"))
        _fold(hasher, value)
    return int.from_bytes(hasher.digest(), "big")


def stored_fingerprint(secret):
    """Return the fingerprint recorded on a V1Secret, or None when it has none."""
    metadata = getattr(secret, "metadata", None)
    labels = getattr(metadata, "labels", None) or {}
    try:
        return int(labels[HASH_LABEL])
    except (KeyError, TypeError, ValueError):
        return None


def build_labels(name, hash_id):
    return {
        APP_LABEL: name,
        HASH_LABEL: str(hash_id),
    }
