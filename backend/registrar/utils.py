import re

_CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')


def snake_case_keys(data):
    """Return a shallow copy of a request payload with camelCase keys in snake_case.

    Keys that are already snake_case pass through, so clients may send either.
    """
    if not hasattr(data, 'items'):
        return data
    out = {}
    for key, value in data.items():
        out[_CAMEL_RE.sub('_', str(key)).lower()] = value
    return out


def first_param(params, *names, default=None):
    for name in names:
        value = params.get(name)
        if value not in (None, ''):
            return value
    return default
