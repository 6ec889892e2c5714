import threading
from contextlib import contextmanager


class RoomLockRegistry:
    """One mutex per room.

    Booking writes hold the room's lock across the availability check and
    the commit, so two requests for the same room cannot both pass the
    check. The registry is per process.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def lock_for(self, room_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, room_id: int):
        lock = self.lock_for(room_id)
        with lock:
            yield


room_locks = RoomLockRegistry()
