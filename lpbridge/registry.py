"""
Handle registry bridging Python objects through foreign callbacks

Foreign callbacks only receive a raw ``void *``. Objects the callback needs
(a cancellation context, a model whose logger receives solver messages) are
registered here and travel across the boundary as integer handles.

Every registration must be paired with :meth:`HandleRegistry.unregister`;
:meth:`HandleRegistry.registered` does both around a ``with`` block.
"""
import atexit
import contextlib
import ctypes
import logging
import os
import threading
from typing import Any, Iterator, List, Optional

logger = logging.getLogger(__name__)

# slot and generation each take half of a pointer so handles fit in a void *
_SLOT_BITS = ctypes.sizeof(ctypes.c_void_p) * 4
_SLOT_MASK = (1 << _SLOT_BITS) - 1
_GENERATION_MASK = _SLOT_MASK


class _Slot:
    __slots__ = ('generation', 'value', 'occupied')

    def __init__(self):
        self.generation = 0
        self.value = None
        self.occupied = False


class HandleRegistry:
    """
    Generation-checked arena mapping integer handles to Python objects.

    A handle encodes ``(generation, slot + 1)``, so it is never 0 (NULL)
    and a handle that outlived its registration no longer resolves, even
    after the slot has been reused.

    Thread-safety: all methods may be called concurrently. The lock is held
    only for the lookup itself, never while a foreign call runs.

    Examples
    --------
    >>> registry = HandleRegistry()
    >>> with registry.registered("payload") as handle:
    ...     registry.resolve(handle)
    'payload'
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._slots: List[_Slot] = []
        self._free: List[int] = []
        self._count = 0

    def register(self, value: Any) -> int:
        """Store ``value`` and return its handle."""
        with self._lock:
            if self._free:
                index = self._free.pop()
            else:
                index = len(self._slots)
                if index + 1 > _SLOT_MASK:
                    raise OverflowError("handle registry is full")
                self._slots.append(_Slot())
            slot = self._slots[index]
            slot.value = value
            slot.occupied = True
            self._count += 1
            return (slot.generation << _SLOT_BITS) | (index + 1)

    def _slot_for(self, handle) -> Optional[_Slot]:
        if not handle:
            return None
        index = (handle & _SLOT_MASK) - 1
        generation = handle >> _SLOT_BITS
        if index < 0 or index >= len(self._slots):
            return None
        slot = self._slots[index]
        if not slot.occupied or slot.generation != generation:
            return None
        return slot

    def resolve(self, handle: Optional[int]) -> Any:
        """Return the object behind ``handle``, or None for unknown and stale handles."""
        with self._lock:
            slot = self._slot_for(handle)
            return slot.value if slot is not None else None

    def unregister(self, handle: int) -> None:
        """
        Remove ``handle`` from the registry.

        Raises
        ------
        KeyError
            If the handle is unknown or was already removed
        """
        with self._lock:
            slot = self._slot_for(handle)
            if slot is None:
                raise KeyError(f"unknown handle: {handle:#x}" if handle else "null handle")
            slot.value = None
            slot.occupied = False
            slot.generation = (slot.generation + 1) & _GENERATION_MASK
            self._free.append((handle & _SLOT_MASK) - 1)
            self._count -= 1

    @contextlib.contextmanager
    def registered(self, value: Any) -> Iterator[int]:
        """Register ``value`` for the duration of a ``with`` block."""
        handle = self.register(value)
        try:
            yield handle
        finally:
            self.unregister(handle)

    def __len__(self) -> int:
        with self._lock:
            return self._count

    def __repr__(self):
        return f"<HandleRegistry entries={len(self)}>"


registry = HandleRegistry()


def _report_leaks():
    leaked = len(registry)
    if leaked:
        level = logging.ERROR if os.environ.get('LPBRIDGE_DEBUG') else logging.WARNING
        logger.log(level, "%d callback handle(s) still registered at exit", leaked)


atexit.register(_report_leaks)
