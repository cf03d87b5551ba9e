"""
Executable query bound to a session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..sql.generators import Statement
from .errors import NonUniqueResultError, NoResultError, QueryError
from .parser import Parameter, parse_query
from .translator import QueryTranslator, TranslatedQuery

if TYPE_CHECKING:
    from ..persistence.session import Session


class Query:
    """
    A parsed query plus its parameter bindings.

    Rows are mapped through the session's identity map: an instance already
    managed for a row is returned as-is (its in-memory state wins), otherwise
    a new instance is materialized and registered with the context.
    """

    def __init__(self, session: "Session", text: str, result_type: Optional[type] = None) -> None:
        self.session = session
        self.text = text
        self.statement = parse_query(text)
        self._translated: TranslatedQuery | None = None
        self.result_type = result_type
        self._parameters: Dict[Parameter, Any] = {}

    def __repr__(self) -> str:
        return f"<Query {self.text!r}>"

    @property
    def translated(self) -> TranslatedQuery:
        if self._translated is None:
            translator = QueryTranslator(self.session.dialect, self.session.registry)
            translated = translator.translate(self.statement)
            if self.result_type is not None and translated.metadata.entity_type is not self.result_type:
                raise QueryError(
                    f"Query selects {translated.metadata.entity_name}, "
                    f"not {self.result_type.__name__}"
                )
            self._translated = translated
        return self._translated

    def set_parameter(self, key: Parameter, value: Any) -> "Query":
        if isinstance(key, str):
            key = key.lstrip(":")
        self._parameters[key] = value
        return self

    def get_result_list(self) -> List[Any]:
        translated = self.translated
        params = []
        for key in translated.parameter_order:
            if key not in self._parameters:
                label = f":{key}" if isinstance(key, str) else f"?{key}"
                raise QueryError(f"Parameter {label} has not been bound")
            params.append(self.session.codecs.encode(self._parameters[key]))

        statement = Statement(
            sql=translated.sql,
            params=tuple(params),
            columns=tuple(str(key) for key in translated.parameter_order),
            table=translated.metadata.table_name,
        )
        rows = self.session.run_query(statement)
        return [self.session.map_row(translated.metadata, row) for row in rows]

    def get_single_result(self) -> Any:
        results = self.get_result_list()
        if not results:
            raise NoResultError(f"No result for query {self.text!r}")
        if len(results) > 1:
            raise NonUniqueResultError(f"Query {self.text!r} returned {len(results)} results")
        return results[0]
