"""IFC GlobalId Value Object.

GlobalId identifies an element across exports. The bridge accepts any
non-empty identifier a host may key its elements by; the 22-character
compressed IFC form can additionally be expanded to a UUID.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

import ifcopenshell.guid

# IFC GlobalId is 22 characters, base64 encoded (A-Z, a-z, 0-9, _, $)
GLOBAL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_$]{22}$")
UUID_PATTERN = re.compile(
    r"^\{?[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}\}?$"
)


@dataclass(frozen=True, slots=True)
class GlobalId:
    """Value Object for an element's global identifier.

    Attributes:
        value: Stripped identifier as sent by the client

    Example:
        >>> gid = GlobalId("2XQ$n5SLP5MBLyL442paFx")
        >>> gid.matches("2xq$N5SLP5MBLyL442PAFX")
        True
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("GlobalId cannot be empty")
        object.__setattr__(self, "value", self.value.strip())

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"GlobalId('{self.value}')"

    @property
    def is_ifc_format(self) -> bool:
        """True for the 22-character compressed IFC form."""
        return bool(GLOBAL_ID_PATTERN.match(self.value))

    @property
    def is_uuid_format(self) -> bool:
        return bool(UUID_PATTERN.match(self.value))

    def expanded(self) -> str | None:
        """Return the UUID form (lowercase hex, no braces) if derivable."""
        if self.is_uuid_format:
            return self.value.strip("{}").replace("-", "").lower()
        if self.is_ifc_format:
            try:
                return ifcopenshell.guid.expand(self.value).replace("-", "").lower()
            except (ValueError, KeyError, IndexError):
                return None
        return None

    def matches(self, other: str | GlobalId | None) -> bool:
        """Case-insensitive comparison, also across compressed/UUID forms.

        Args:
            other: Identifier read from the host model

        Returns:
            True if both denote the same element
        """
        if other is None:
            return False
        candidate = other if isinstance(other, GlobalId) else GlobalId.from_string(other)
        if candidate is None:
            return False
        if self.value.casefold() == candidate.value.casefold():
            return True
        # Compressed GUIDs are case-sensitive, so compare expanded forms exactly
        mine, theirs = self.expanded(), candidate.expanded()
        return mine is not None and mine == theirs

    @classmethod
    def from_string(cls, value: str | None) -> GlobalId | None:
        """Create GlobalId from string, returning None if blank."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None
