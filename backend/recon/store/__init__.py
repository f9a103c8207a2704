from recon.store.base import ReconciliationStore
from recon.store.sqlalchemy_store import SqlAlchemyStore

__all__ = ["ReconciliationStore", "SqlAlchemyStore"]
