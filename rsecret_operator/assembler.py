# -*- coding: utf-8 -*-
"""Build the full secret data for an RSecret from all of its backends."""

import logging
from concurrent.futures import ThreadPoolExecutor


def merge_secret_data(merged, to_merge):
    """Merge to_merge beneath merged, keys already present in merged are kept."""
    for key, value in to_merge.items():
        if key not in merged:
            merged[key] = value
    return merged


class SecretAssembler:
    """Resolves every backend of an RSecret and merges the results.

    Backends are resolved in parallel but merged strictly in declaration order, so
    for a key produced by several backends the one declared first wins. This lets a
    fallback backend be listed after the primary one.
    """

    def __init__(self, resolver, max_workers=4):
        self.resolver = resolver
        self.max_workers = max_workers

    def assemble(self, rsecret):
        """
        Return the merged secret data for rsecret sorted by key.

        All backends settle before anything is merged, the caller never sees a
        partial result.
        """
        if not rsecret.resources:
            return {}

        if len(rsecret.resources) == 1 or self.max_workers <= 1:
            results = [self.resolver.resolve(backend) for backend in rsecret.resources]
        else:
            workers = min(self.max_workers, len(rsecret.resources))
            with ThreadPoolExecutor(max_workers=workers,
                                    thread_name_prefix=f"resolve_{rsecret.name}") as executor:
                results = list(executor.map(self.resolver.resolve, rsecret.resources))

        secrets = {}
        for result in results:
            merge_secret_data(secrets, result)

        logging.getLogger(__name__).debug(
            f"Assembled {len(secrets)} keys for rsecret {rsecret.name} "
            f"in namespace {rsecret.namespace}")
        return dict(sorted(secrets.items()))
