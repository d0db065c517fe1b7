"""
Access to the ``SCHEDULING`` settings dict with defaults.
"""

from django.conf import settings

DEFAULTS = {
    'MAX_OCCURRENCES_PER_REQUEST': 156,
    'DEFAULT_RESOURCE_TIMEZONE': 'UTC',
    'OCCURRENCE_ID_NAMESPACE': '6f1c2b3e-8d4a-4c59-9a0e-3b7d5e2f1a90',
}


def get_setting(name):
    """Return a scheduling setting, falling back to the built-in default."""
    overrides = getattr(settings, 'SCHEDULING', {}) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
