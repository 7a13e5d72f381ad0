# -*- coding: utf-8 -*-
"""Turn text fetched from a backend into secret data entries."""

import json
import logging


def to_bytes(value):
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        value = json.dumps(value)
    return value.encode("utf-8")


def to_text(value):
    """Scalar strings are kept verbatim, anything else is serialised as json."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def get_json_string_nested_value(json_string, path):
    """Extract the value at a dotted path from a json document.

    Array elements are addressed by their index as a path segment, so
    ``phones.0`` is the first phone. A path that does not exist yields an empty
    string rather than an error.

    Args:
        json_string (str): The json document.
        path (str): Dotted path, e.g. ``address.street``.

    Returns:
        str: The value, json serialised when it is not a string.

    Raises:
        ValueError: If json_string is not valid json.
    """
    current = json.loads(json_string)

    for segment in path.split("."):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return ""

    return to_text(current)


def get_json_string_as_secret_data(json_string):
    """Expand every top level property of a json object into its own entry.

    Raises:
        ValueError: If json_string is not a json object.
    """
    document = json.loads(json_string)
    if not isinstance(document, dict):
        raise ValueError(f"Expected a json object got {type(document).__name__}")

    return {str(key): to_bytes(to_text(value)) for key, value in document.items()}


def get_secret_data(secret_field, value_string, expand=False):
    """
    Shape the text fetched for one field into secret data.

    :param secret_field: the SecretField declaration
    :param value_string: text the backend returned for the field
    :param expand: whether a field without a key expands the whole json object
    :return: dict of key to bytes, empty when nothing should be written
    """
    secrets = {}

    if secret_field.key:
        if secret_field.is_json_string and secret_field.remote_path:
            try:
                value = get_json_string_nested_value(value_string, secret_field.remote_path)
            except ValueError:
                logging.getLogger(__name__).exception(
                    f"Value for {secret_field.key} is not valid json")
                return secrets

            if value:
                secrets[secret_field.key] = to_bytes(value)
            else:
                logging.getLogger(__name__).warning(
                    f"Path {secret_field.remote_path} not found for {secret_field.key}")
        else:
            secrets[secret_field.key] = to_bytes(value_string)

    elif expand:
        try:
            secrets = get_json_string_as_secret_data(value_string)
        except ValueError:
            logging.getLogger(__name__).exception(
                f"Cannot expand {secret_field.value} into secret data")

    else:
        logging.getLogger(__name__).warning(
            f"Field {secret_field.value} has no key and its backend cannot expand it")

    return secrets
