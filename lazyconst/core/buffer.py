# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Shared Buffer

An immutable block of raw bytes. A buffer has no shape; views give it one.
Lifetime follows Python reference counting: the bytes live as long as the
longest-lived view that references them.
"""

import numpy as np

from .types import BType, bytewidth_of_btype, numpy_dtype_of_btype


class SharedBuffer:
    """
    Read-only byte storage shared by lazy and eager constants.

    Example:
        buf = SharedBuffer.from_bytes(b"\\x01\\x00\\x02\\x00")
        buf.as_array(BType.INT16)  # array([1, 2], dtype=int16)
    """

    __slots__ = ("_data", "__weakref__")

    def __init__(self, data: np.ndarray):
        """
        Take ownership of a 1-D uint8 array and freeze it.

        Callers must not keep a writable alias; use the ``from_*``
        constructors for data owned by someone else.
        """
        data = np.asarray(data)
        if data.dtype != np.uint8 or data.ndim != 1:
            raise TypeError("SharedBuffer expects a 1-D uint8 array")
        data.flags.writeable = False
        self._data = data

    @classmethod
    def allocate(cls, nbytes: int) -> tuple:
        """
        Allocate an uninitialized buffer.

        Returns:
            (writable uint8 array, freeze callable returning the SharedBuffer)
        """
        data = np.empty(nbytes, dtype=np.uint8)
        return data, lambda: cls(data)

    @classmethod
    def from_bytes(cls, raw) -> "SharedBuffer":
        """Wrap ``bytes`` without copying; other bytes-likes are copied."""
        if isinstance(raw, bytes):
            return cls(np.frombuffer(raw, dtype=np.uint8))
        return cls(np.frombuffer(bytes(raw), dtype=np.uint8))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "SharedBuffer":
        """Share a read-only array's bytes, or copy a writable one."""
        array = np.asarray(array)
        if array.flags.writeable or not array.flags.c_contiguous:
            array = array.copy()
        return cls(array.reshape(-1).view(np.uint8))

    @property
    def nbytes(self) -> int:
        return self._data.size

    def __len__(self) -> int:
        return self._data.size

    def num_elements(self, btype: BType) -> int:
        return self._data.size // bytewidth_of_btype(btype)

    def as_bytes(self) -> np.ndarray:
        """Read-only uint8 view of the whole buffer."""
        return self._data

    def as_array(self, btype: BType) -> np.ndarray:
        """Read-only 1-D view of the buffer as elements of ``btype``."""
        return self._data.view(numpy_dtype_of_btype(btype))

    def tobytes(self) -> bytes:
        return self._data.tobytes()

    def __repr__(self) -> str:
        return f"SharedBuffer(nbytes={self.nbytes})"
