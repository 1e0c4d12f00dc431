"""
Per-lease serialization of ledger mutations.

Payment writes, soft deletes, rent adjustments, invoice regeneration and
termination all read a lease's invoices and payments, recompute the FIFO
allocation and write it back. Two of those running at once on the same lease
can each read the other's half-written state, so they are serialized:

- lease_lock(): in-process re-entrant lock keyed by lease id
- lock_lease_row(): SELECT ... FOR UPDATE on the lease row, which serializes
  across processes on databases that support row locks (ignored by SQLite)
"""
import threading
import weakref
from contextlib import ExitStack, contextmanager
from typing import Dict, Iterable, Iterator

from sqlalchemy.orm import Session

from ledger.exceptions import ResourceNotFoundError
from models import Lease

_registry_lock = threading.Lock()
# A lease's lock lives only while some thread holds or waits on it
_lease_locks: "weakref.WeakValueDictionary[int, threading.RLock]" = weakref.WeakValueDictionary()


def _lock_for(lease_id: int) -> threading.RLock:
     with _registry_lock:
          lock = _lease_locks.get(lease_id)
          if lock is None:
               lock = threading.RLock()
               _lease_locks[lease_id] = lock
          return lock


@contextmanager
def lease_lock(lease_id: int) -> Iterator[None]:
     """Hold the ledger lock for one lease. Re-entrant within a thread."""
     lock = _lock_for(lease_id)
     with lock:
          yield


@contextmanager
def lease_locks(lease_ids: Iterable[int]) -> Iterator[None]:
     """Hold several lease locks, always acquired in ascending id order."""
     with ExitStack() as stack:
          for lease_id in sorted(set(lease_ids)):
               stack.enter_context(lease_lock(lease_id))
          yield


def lock_lease_row(db: Session, lease_id: int) -> Lease:
     """
     Load a lease with a row lock for the rest of the transaction.

     Raises:
          ResourceNotFoundError: If the lease does not exist.
     """
     lease = (
          db.query(Lease)
          .filter(Lease.id == lease_id)
          .with_for_update()
          .first()
     )
     if lease is None:
          raise ResourceNotFoundError("Lease", lease_id)
     return lease


@contextmanager
def locked_lease(db: Session, lease_id: int) -> Iterator[Lease]:
     """
     Run a ledger mutation on one lease and commit it before the lock is
     released, so the next writer always sees the committed result.
     """
     with lease_lock(lease_id):
          lease = lock_lease_row(db, lease_id)
          try:
               yield lease
               db.commit()
          except Exception:
               db.rollback()
               raise


@contextmanager
def locked_leases(db: Session, lease_ids: Iterable[int]) -> Iterator[Dict[int, Lease]]:
     """locked_lease() for several leases at once, locked in ascending id order."""
     ids = sorted(set(lease_ids))
     with lease_locks(ids):
          leases = {lease_id: lock_lease_row(db, lease_id) for lease_id in ids}
          try:
               yield leases
               db.commit()
          except Exception:
               db.rollback()
               raise
