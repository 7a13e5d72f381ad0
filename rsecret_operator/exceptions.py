# -*- coding: utf-8 -*-

class RSecretError(Exception):
    """Base Error class."""


class BackendFetchError(RSecretError):
    """Raised when a remote backend cannot produce a value for a field."""


class NoActiveSecretVersion(BackendFetchError):
    CUSTOM_ERROR_MESSAGE = "Secret {} has no active enabled versions"

    def __init__(self, secret):
        super(NoActiveSecretVersion, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret))


class SecretChecksumMismatch(BackendFetchError):
    CUSTOM_ERROR_MESSAGE = "Secret version {} payload failed crc32c verification"

    def __init__(self, version_name):
        super(SecretChecksumMismatch, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(version_name))


class StackOutputNotFound(BackendFetchError):
    CUSTOM_ERROR_MESSAGE = "Stack {} has no output {}"

    def __init__(self, stack_name, output_key):
        super(StackOutputNotFound, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(stack_name, output_key))
        self._stack_name = stack_name
        self._output_key = output_key

    @property
    def stack_name(self):
        return self._stack_name

    @property
    def output_key(self):
        return self._output_key


class BackendConfigurationError(BackendFetchError):
    CUSTOM_ERROR_MESSAGE = "Backend {} is missing configuration {}"

    def __init__(self, backend, setting):
        super(BackendConfigurationError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(backend, setting))
        self._backend = backend
        self._setting = setting

    @property
    def backend(self):
        return self._backend

    @property
    def setting(self):
        return self._setting


class EmptyRemoteValue(BackendFetchError):
    CUSTOM_ERROR_MESSAGE = "Backend {} returned no content for {}"

    def __init__(self, backend, lookup):
        super(EmptyRemoteValue, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(backend, lookup))
