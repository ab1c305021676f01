"""
Test helpers
"""

from filesorter.config import ConfigSnapshot


def make_snapshot(source="", target="", rules=None, categories=None, **extra):
    """Build a snapshot from camelCase rule/category dicts."""
    data = {
        "sourceFolder": str(source) if source else "",
        "baseTargetFolder": str(target) if target else "",
        "fileRules": rules or [],
        "customCategories": categories or [],
    }
    data.update(extra)
    return ConfigSnapshot.from_dict(data)
