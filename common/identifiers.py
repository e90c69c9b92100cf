"""
Identifiers of geodetic objects.

An :class:`Identifier` is the stable key of an ellipsoid, datum, operation
or CRS: an authority (``EPSG``, ``IGNF``, ``LOCAL``...), a code within that
authority, and human-readable names.
"""

import itertools
import threading
from typing import Iterable, List, Optional, Tuple

LOCAL_AUTHORITY = "LOCAL"

_local_codes = itertools.count(1)
_local_lock = threading.Lock()


class Identifier:
    """Authority, code and names of an object.

    Two identifiers are equal when their authority codes are equal, or when
    one of them carries an alias equal to the other (or to one of its
    aliases).

    Parameters
    ----------
    authority : str
        Authority name, e.g. ``"EPSG"``.
    code : str or int
        Code within the authority.
    name : str
        Full name.
    short_name : str, optional
        Short name; defaults to ``name``.
    remarks : str, optional
        Free-text remarks.
    aliases : iterable of Identifier, optional
        Other identifiers of the same object.
    """

    def __init__(
        self,
        authority: str,
        code,
        name: str,
        short_name: Optional[str] = None,
        remarks: Optional[str] = None,
        aliases: Iterable['Identifier'] = ()
    ):
        self.authority = authority
        self.code = str(code)
        self.name = name
        self._short_name = short_name
        self.remarks = remarks
        self._aliases: List[Identifier] = list(aliases)

    @classmethod
    def local(cls, kind: str, name: str, short_name: Optional[str] = None) -> 'Identifier':
        """Identifier in the LOCAL authority with a process-unique code."""
        with _local_lock:
            number = next(_local_codes)
        return cls(LOCAL_AUTHORITY, f"{kind}_{number}", name, short_name)

    @property
    def short_name(self) -> str:
        return self._short_name if self._short_name else self.name

    @property
    def aliases(self) -> Tuple['Identifier', ...]:
        return tuple(self._aliases)

    def add_alias(self, alias: 'Identifier') -> None:
        if alias is not self and alias not in self._aliases:
            self._aliases.append(alias)

    def key(self) -> Tuple[str, str]:
        """Case-insensitive (authority, code) pair."""
        return self.authority.upper(), self.code.upper()

    def _keys(self) -> set:
        keys = {self.key()}
        keys.update(a.key() for a in self._aliases)
        return keys

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Identifier):
            return NotImplemented
        if self.key() == other.key():
            return True
        return bool(self._keys() & other._keys())

    def __hash__(self) -> int:
        # Alias overlap makes equality non-transitive on keys
        return 0

    def __str__(self) -> str:
        return f"{self.authority}:{self.code}"

    def __repr__(self) -> str:
        return f"Identifier({self.authority!r}, {self.code!r}, {self.name!r})"
