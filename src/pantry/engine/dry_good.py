"""
DryGood - the default snapshot type handed back on cache reads.
"""

from typing import Any


class DryGood:
    """
    An attribute bag restored from a cached record.

    Every cached attribute becomes an instance attribute. Two DryGoods are
    equal when they hold the same attributes.

    Usage:
        good = DryGood({"id": 1, "name": "Matthew"})
        good.name          # "Matthew"
        good.attributes()  # {"id": 1, "name": "Matthew"}
    """

    def __init__(self, attributes: dict[str, Any] | None = None, **kwargs):
        self.__dict__.update({str(k): v for k, v in (attributes or {}).items()})
        self.__dict__.update(kwargs)

    def attributes(self) -> dict[str, Any]:
        return dict(self.__dict__)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict of the attributes, not wrapped in any outer key."""
        return self.attributes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DryGood):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __repr__(self) -> str:
        fields = " ".join(f"{k}={v!r}" for k, v in self.__dict__.items())
        return f"<{self.__class__.__name__} {fields}>"
