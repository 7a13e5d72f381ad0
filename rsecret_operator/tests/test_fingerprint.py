# -*- coding: utf-8 -*-
"""
Tests the secret content fingerprint

"""

import random
import string
import unittest

from kubernetes import client

from rsecret_operator import fingerprint, stored_fingerprint
from rsecret_operator.fingerprint import build_labels


def random_data(rng, size):
    data = {}
    while len(data) < size:
        key = "".join(rng.choice(string.ascii_letters) for _ in range(rng.randint(1, 12)))
        data[key] = bytes(rng.getrandbits(8) for _ in range(rng.randint(0, 32)))
    return data


def secret_with_labels(labels):
    return client.V1Secret(metadata=client.V1ObjectMeta(name="s", labels=labels))


class TestFingerprint(unittest.TestCase):

    def test_independent_of_insertion_order(self):
        rng = random.Random(7)
        for _ in range(50):
            data = random_data(rng, rng.randint(0, 10))
            items = list(data.items())
            rng.shuffle(items)
            assert fingerprint(data) == fingerprint(dict(items))

    def test_sensitive_to_changes(self):
        rng = random.Random(11)
        for _ in range(50):
            data = random_data(rng, rng.randint(1, 10))
            before = fingerprint(data)
            key = rng.choice(list(data))

            changed_value = dict(data)
            changed_value[key] = data[key] + b"!"
            assert fingerprint(changed_value) != before

            removed = dict(data)
            del removed[key]
            assert fingerprint(removed) != before

            added = dict(data)
            added[key + "_extra"] = b""
            assert fingerprint(added) != before

    def test_boundaries_matter(self):
        assert fingerprint({"ab": b"c"}) != fingerprint({"a": b"bc"})
        assert fingerprint({"a": b"", "b": b"x"}) != fingerprint({"a": b"x", "b": b""})

    def test_fits_in_64_bits(self):
        value = fingerprint({"a": b"1"})
        assert 0 <= value < 2 ** 64
        assert fingerprint({}) == fingerprint({})

    def test_str_and_bytes_agree(self):
        assert fingerprint({"a": "é"}) == fingerprint({"a": "é".encode("utf-8")})


class TestStoredFingerprint(unittest.TestCase):

    def test_round_trip_through_labels(self):
        value = fingerprint({"k": b"v"})
        labels = build_labels("demo", value)
        assert labels == {"app": "demo", "hash_id": str(value)}
        assert stored_fingerprint(secret_with_labels(labels)) == value

    def test_missing_or_invalid(self):
        assert stored_fingerprint(secret_with_labels(None)) is None
        assert stored_fingerprint(secret_with_labels({"app": "demo"})) is None
        assert stored_fingerprint(secret_with_labels({"hash_id": "not-a-number"})) is None
        assert stored_fingerprint(client.V1Secret()) is None


if __name__ == '__main__':
    unittest.main()
