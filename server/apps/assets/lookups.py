"""Custom ORM lookups used by asset search.

``ilike`` runs a raw, already escaped LIKE pattern case-insensitively.
Django's own ``contains``-style lookups escape wildcards themselves,
which rules out patterns such as '%"key":"%value%"%'.

SQLite's built-in UPPER() only folds ASCII letters, so on SQLite the
lookup uses ``UNICODE_UPPER``, registered on every new connection with
Python's ``str.upper``. In-memory matching folds the same way.
"""

from typing import Any, override

from django.db.backends.signals import connection_created
from django.db.models import CharField, Lookup, TextField
from django.db.models.functions import Lower
from django.dispatch import receiver

_Compiler = Any
_Connection = Any

SQLITE_UPPER = 'UNICODE_UPPER'


def _unicode_upper(value: object) -> str | None:
    return None if value is None else str(value).upper()


@receiver(connection_created)
def register_sqlite_functions(
    sender: object,
    connection: _Connection,
    **kwargs: object,
) -> None:
    """Add ``UNICODE_UPPER`` to new SQLite connections.

    Args:
        sender: Database wrapper class.
        connection: Database wrapper of the new connection.
        **kwargs: Additional signal arguments.
    """
    if connection.vendor != 'sqlite':
        return
    connection.connection.create_function(
        SQLITE_UPPER,
        1,
        _unicode_upper,
        deterministic=True,
    )


@CharField.register_lookup
@TextField.register_lookup
class ILike(Lookup):
    """Case-insensitive LIKE with backslash as the escape character."""

    lookup_name = 'ilike'

    @override
    def as_sql(
        self,
        compiler: _Compiler,
        connection: _Connection,
    ) -> tuple[str, list[Any]]:
        """Render ``UPPER(lhs) LIKE UPPER(rhs) ESCAPE '\\'``."""
        return self._render(compiler, connection, 'UPPER', " ESCAPE '\\'")

    def as_sqlite(
        self,
        compiler: _Compiler,
        connection: _Connection,
    ) -> tuple[str, list[Any]]:
        """Fold case with Unicode rules instead of SQLite's ASCII ones."""
        return self._render(compiler, connection, SQLITE_UPPER, " ESCAPE '\\'")

    def as_mysql(
        self,
        compiler: _Compiler,
        connection: _Connection,
    ) -> tuple[str, list[Any]]:
        """MySQL already escapes with backslash and rejects the literal."""
        return self._render(compiler, connection, 'UPPER', '')

    def _render(
        self,
        compiler: _Compiler,
        connection: _Connection,
        upper: str,
        escape: str,
    ) -> tuple[str, list[Any]]:
        lhs, lhs_params = self.process_lhs(compiler, connection)
        rhs, rhs_params = self.process_rhs(compiler, connection)
        sql = f'{upper}({lhs}) LIKE {upper}({rhs}){escape}'
        return sql, [*lhs_params, *rhs_params]


# Enables lookups like file_type__lower__in=[...]
CharField.register_lookup(Lower)
