"""Custom API key comparison.

A custom API key is reported when exactly one environment defines it.
"""

from collections.abc import Callable, Sequence

from env_compare.reporting import print_api_key_differences
from env_compare.schema.models import Environment

ApiKeysMap = dict[str, dict[str, str]]


def build_api_keys_map(environments: Sequence[Environment]) -> ApiKeysMap:
    """Map every API key to the environments defining it.

    Returns:
        ``{api_key: {environment_name: api_key}}``
    """
    api_keys: ApiKeysMap = {}
    for env in environments:
        for api_key in env.api_keys:
            api_keys.setdefault(api_key, {})[env.name] = api_key
    return api_keys


def compare_api_keys(
    environments: Sequence[Environment],
    report: Callable[[Sequence[Environment], ApiKeysMap], None] | None = None,
) -> bool:
    """Report API keys that only one environment defines.

    Returns:
        ``True`` if any such key exists.
    """
    differing = {
        api_key: keys_by_env
        for api_key, keys_by_env in build_api_keys_map(environments).items()
        if len(keys_by_env) == 1
    }

    if not differing:
        return False

    (report or print_api_key_differences)(environments, differing)
    return True
