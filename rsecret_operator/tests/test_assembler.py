# -*- coding: utf-8 -*-
"""
Tests merging the secret data of several backends

"""

import threading
import time
import unittest
from unittest import mock

from rsecret_operator import Backend, \
    BackendResolver, \
    BackendType, \
    RSecret, \
    SecretAssembler, \
    SecretField, \
    ValueCache, \
    merge_secret_data


def plaintext(*pairs):
    return Backend(backend=BackendType.PLAINTEXT,
                   data=[SecretField(value=value, key=key) for key, value in pairs])


class TestMerge(unittest.TestCase):

    def test_existing_keys_kept(self):
        merged = {"a": b"1"}
        assert merge_secret_data(merged, {"a": b"2", "b": b"3"}) == {"a": b"1", "b": b"3"}

    def test_empty(self):
        assert merge_secret_data({}, {}) == {}


class TestSecretAssembler(unittest.TestCase):

    def setUp(self):
        self.clients = mock.MagicMock()
        self.resolver = BackendResolver(self.clients, ValueCache())

    def test_no_backends(self):
        rsecret = RSecret(name="empty", namespace="default")
        assert SecretAssembler(self.resolver).assemble(rsecret) == {}

    def test_first_declared_backend_wins(self):
        self.clients.get_ssm_parameter.return_value = "from ssm"
        ssm = Backend(backend=BackendType.SSM,
                      data=[SecretField(value="/shared", key="shared"),
                            SecretField(value="/only", key="ssm_only")])
        rsecret = RSecret(name="merge", namespace="default",
                          resources=[plaintext(("shared", "from plaintext")), ssm])

        for workers in (1, 4):
            data = SecretAssembler(self.resolver, max_workers=workers).assemble(rsecret)
            assert data == {"shared": b"from plaintext", "ssm_only": b"from ssm"}

    def test_declaration_order_not_completion_order(self):
        class SlowFirstResolver:
            def resolve(self, backend):
                if backend.data[0].value == "slow":
                    time.sleep(0.2)
                return {"key": backend.data[0].value.encode("utf-8")}

        rsecret = RSecret(name="order", namespace="default",
                          resources=[plaintext(("key", "slow")), plaintext(("key", "fast"))])
        data = SecretAssembler(SlowFirstResolver(), max_workers=2).assemble(rsecret)
        assert data == {"key": b"slow"}

    def test_backends_resolve_in_parallel(self):
        barrier = threading.Barrier(3, timeout=5)

        class BarrierResolver:
            def resolve(self, backend):
                # only returns once all three backends are in flight at the same time
                barrier.wait()
                return {backend.data[0].key: b"x"}

        rsecret = RSecret(name="parallel", namespace="default",
                          resources=[plaintext(("a", "1")),
                                     plaintext(("b", "2")),
                                     plaintext(("c", "3"))])
        data = SecretAssembler(BarrierResolver(), max_workers=3).assemble(rsecret)
        assert list(data) == ["a", "b", "c"]

    def test_failed_backend_keeps_others(self):
        self.clients.get_ssm_parameter.side_effect = ConnectionError("down")
        ssm = Backend(backend=BackendType.SSM, data=[SecretField(value="/p", key="ssm")])
        unknown = Backend(backend=BackendType.UNKNOWN, data=[SecretField(value="x", key="x")])
        rsecret = RSecret(name="partial", namespace="default",
                          resources=[ssm, unknown, plaintext(("plain", "ok"))])
        data = SecretAssembler(self.resolver).assemble(rsecret)
        assert data == {"plain": b"ok"}


if __name__ == '__main__':
    unittest.main()
