"""Utility functions shared across cubefilter modules."""

__all__ = [
    "IgnoringDictionary",
    "ALL_KEY",
]


class IgnoringDictionary(dict):
    """Simple dictionary extension that will ignore any keys of which values
    are empty (None/False)"""

    def __setitem__(self, key, value):
        if value is not None:
            super().__setitem__(key, value)

    def set(self, key, value):
        """Sets `value` for `key` even if value is null."""
        super().__setitem__(key, value)

    def __repr__(self):
        items = []
        for key, value in self.items():
            item = f"{key!r}: {value!r}"
            items.append(item)

        return "{%s}" % ", ".join(items)


# Key field (and key value) of the single row of an ungrouped query
ALL_KEY = "_all"
