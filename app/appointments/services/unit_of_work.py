# appointments/services/unit_of_work.py
from django.db import DEFAULT_DB_ALIAS, transaction


class UnitOfWork:
    """
    Transaction boundary and database handle shared by the scheduling services.

    ``atomic()`` blocks nest: an inner block joins the outer transaction as a
    savepoint, so a failure anywhere rolls back the whole compound write.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def atomic(self):
        return transaction.atomic(using=self.using)

    def query(self, model):
        """Default manager of ``model`` bound to this unit's database"""
        return model._default_manager.using(self.using)
