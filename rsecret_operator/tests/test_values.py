# -*- coding: utf-8 -*-
"""
Tests shaping fetched text into secret data

"""

import json
import logging
import unittest

from rsecret_operator import SecretField
from rsecret_operator.values import get_json_string_as_secret_data, \
    get_json_string_nested_value, \
    get_secret_data, \
    to_bytes

PERSON = json.dumps({
    "name": "John Doe",
    "age": 43,
    "address": {
        "street": "Downing Street 10",
        "city": "London",
        "country": "Great Britain"
    },
    "phones": [
        "+44 1234567",
        "+44 2345678"
    ]
})


def setup_module():
    logging.basicConfig(level=logging.DEBUG)


class TestNestedValue(unittest.TestCase):

    def test_top_level_string(self):
        assert get_json_string_nested_value(PERSON, "name") == "John Doe"

    def test_nested_object(self):
        assert get_json_string_nested_value(PERSON, "address.street") == "Downing Street 10"

    def test_array_index(self):
        assert get_json_string_nested_value(PERSON, "phones.0") == "+44 1234567"
        assert get_json_string_nested_value(PERSON, "phones.1") == "+44 2345678"

    def test_missing_path_is_empty(self):
        assert get_json_string_nested_value(PERSON, "notExisted") == ""
        assert get_json_string_nested_value(PERSON, "address.zip") == ""
        assert get_json_string_nested_value(PERSON, "phones.7") == ""
        assert get_json_string_nested_value(PERSON, "name.first") == ""

    def test_non_string_values_are_json(self):
        assert get_json_string_nested_value(PERSON, "age") == "43"
        assert json.loads(get_json_string_nested_value(PERSON, "phones")) == \
            ["+44 1234567", "+44 2345678"]

    def test_invalid_json(self):
        with self.assertRaises(ValueError):
            get_json_string_nested_value("not json {", "name")


class TestExpand(unittest.TestCase):

    def test_object_expands(self):
        data = get_json_string_as_secret_data('{"user": "admin", "port": 5432, "tls": {"on": true}}')
        assert data == {
            "user": b"admin",
            "port": b"5432",
            "tls": b'{"on": true}',
        }

    def test_non_object_rejected(self):
        with self.assertRaises(ValueError):
            get_json_string_as_secret_data('["a", "b"]')


class TestGetSecretData(unittest.TestCase):

    def test_plain_value_with_key(self):
        field = SecretField(value="/prod/db", key="password")
        assert get_secret_data(field, "s3cr3t") == {"password": b"s3cr3t"}

    def test_json_path_extracted(self):
        field = SecretField(value="person", key="street", is_json_string=True,
                            remote_path="address.street")
        assert get_secret_data(field, PERSON) == {"street": b"Downing Street 10"}

    def test_json_path_missing_is_omitted(self):
        field = SecretField(value="person", key="missing", is_json_string=True,
                            remote_path="notExisted")
        assert get_secret_data(field, PERSON) == {}

    def test_json_flag_without_path_keeps_raw_text(self):
        field = SecretField(value="person", key="person", is_json_string=True)
        assert get_secret_data(field, PERSON) == {"person": PERSON.encode("utf-8")}

    def test_invalid_json_is_omitted(self):
        field = SecretField(value="person", key="street", is_json_string=True,
                            remote_path="address.street")
        assert get_secret_data(field, "{broken") == {}

    def test_no_key_expands_when_allowed(self):
        field = SecretField(value="stack")
        data = get_secret_data(field, '{"Endpoint": "db.local", "Port": "5432"}', expand=True)
        assert data == {"Endpoint": b"db.local", "Port": b"5432"}

    def test_no_key_without_expand_is_skipped(self):
        field = SecretField(value="/prod/db")
        assert get_secret_data(field, '{"a": "b"}') == {}

    def test_no_key_non_object_is_skipped(self):
        field = SecretField(value="stack")
        assert get_secret_data(field, '"just a string"', expand=True) == {}

    def test_to_bytes(self):
        assert to_bytes("é") == "é".encode("utf-8")
        assert to_bytes(b"raw") == b"raw"
        assert to_bytes(7) == b"7"


if __name__ == '__main__':
    unittest.main()
