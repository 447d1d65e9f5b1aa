# Copyright (c) "Neo4j"
# Neo4j Sweden AB [https://neo4j.com]
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


from __future__ import annotations

import typing as t

from ._log import log
from ._query import Query


if t.TYPE_CHECKING:
    import typing_extensions as te


__all__ = [
    "QueryBuilder",
]


class QueryBuilder:
    """Fluent builder for Cypher queries.

    Clause fragments are collected in call order and rendered by
    :meth:`build`. Fragment text is used verbatim; nothing is validated or
    escaped. Parameters are carried alongside the text and can be fetched
    with :meth:`get_parameters`.

    Example::

        builder = (
            QueryBuilder()
            .match("(p:Person)")
            .where("p.age > $age")
            .and_where("p.name = $name")
            .return_("p")
            .order_by("p.age DESC")
            .limit(10)
            .set_parameter("age", 18)
            .set_parameter("name", "John")
        )
        session.run(builder.build(), builder.get_parameters())
    """

    _match_clauses: t.List[str]
    _where_clauses: t.List[str]
    _with_clauses: t.List[str]
    _return_clause: str
    _order_by_clause: str
    _skip: t.Optional[int]
    _limit: t.Optional[int]
    _parameters: t.Dict[str, t.Any]

    def __init__(self) -> None:
        self._reset()

    def __repr__(self) -> str:
        clauses = (
            len(self._match_clauses)
            + len(self._where_clauses)
            + len(self._with_clauses)
            + bool(self._return_clause)
            + bool(self._order_by_clause)
            + (self._skip is not None)
            + (self._limit is not None)
        )
        return (f"<{self.__class__.__name__} clauses={clauses} "
                f"parameters={len(self._parameters)}>")

    def _reset(self) -> None:
        self._match_clauses = []
        self._where_clauses = []
        self._with_clauses = []
        self._return_clause = ""
        self._order_by_clause = ""
        self._skip = None
        self._limit = None
        self._parameters = {}

    def match(self, pattern: str) -> te.Self:
        """Add a ``MATCH`` clause.

        :param pattern: the pattern to match, e.g. ``"(p:Person)"``.

        :return: this builder
        """
        self._match_clauses.append(f"MATCH {pattern}")
        return self

    def optional_match(self, pattern: str) -> te.Self:
        """Add an ``OPTIONAL MATCH`` clause.

        :param pattern: the pattern to optionally match.

        :return: this builder
        """
        self._match_clauses.append(f"OPTIONAL MATCH {pattern}")
        return self

    def where(self, condition: str) -> te.Self:
        """Add a ``WHERE`` clause.

        :param condition: the filter condition.

        :return: this builder
        """
        self._where_clauses.append(f"WHERE {condition}")
        return self

    def and_where(self, condition: str) -> te.Self:
        """Add a condition joined with ``AND``.

        If no ``WHERE`` clause has been added yet, this is the same as
        :meth:`where`.

        .. note::
            Conditions are not grouped. Mixing :meth:`and_where` and
            :meth:`or_where` renders a flat ``AND``/``OR`` sequence which is
            subject to Cypher's own operator precedence. Put parentheses into
            the condition text if a different grouping is needed.

        :param condition: the condition to add.

        :return: this builder
        """
        if not self._where_clauses:
            return self.where(condition)
        self._where_clauses.append(f"AND {condition}")
        return self

    def or_where(self, condition: str) -> te.Self:
        """Add a condition joined with ``OR``.

        Behaves like :meth:`and_where` otherwise.

        :param condition: the condition to add.

        :return: this builder
        """
        if not self._where_clauses:
            return self.where(condition)
        self._where_clauses.append(f"OR {condition}")
        return self

    def with_(self, expression: str) -> te.Self:
        """Add a ``WITH`` clause.

        :param expression: the projection, e.g. ``"p, p.age AS age"``.

        :return: this builder
        """
        self._with_clauses.append(f"WITH {expression}")
        return self

    def return_(self, expression: str) -> te.Self:
        """Set the ``RETURN`` clause, replacing any previous one.

        :param expression: the expression to return.

        :return: this builder
        """
        self._return_clause = f"RETURN {expression}"
        return self

    def order_by(self, expression: str) -> te.Self:
        """Set the ``ORDER BY`` clause, replacing any previous one.

        :param expression: the sort expression, e.g. ``"p.age DESC"``.

        :return: this builder
        """
        self._order_by_clause = f"ORDER BY {expression}"
        return self

    def skip(self, count: int) -> te.Self:
        """Set the number of records to skip.

        The value is not checked.

        :param count: number of records to skip.

        :return: this builder
        """
        self._skip = count
        return self

    def limit(self, count: int) -> te.Self:
        """Set the maximum number of records to return.

        The value is not checked.

        :param count: maximum number of records.

        :return: this builder
        """
        self._limit = count
        return self

    def set_parameter(self, name: str, value: t.Any) -> te.Self:
        """Bind a value to the placeholder ``$name``.

        Setting the same name again replaces the previous value.

        :param name: the parameter name, without the leading ``$``.
        :param value: any value the executing driver can serialize.

        :return: this builder
        """
        self._parameters[name] = value
        return self

    def build(self) -> str:
        """Render the query.

        Clauses are emitted in a fixed order regardless of call order:
        ``MATCH``/``OPTIONAL MATCH`` (and subqueries), ``WHERE``/``AND``/``OR``,
        ``WITH``, ``RETURN``, ``ORDER BY``, ``SKIP``, ``LIMIT``.
        Within each group, the call order is kept.

        :return: the clauses joined by newlines; an empty string if nothing
            has been added.
        """
        parts = [
            *self._match_clauses,
            *self._where_clauses,
            *self._with_clauses,
            self._return_clause,
            self._order_by_clause,
        ]
        if self._skip is not None:
            parts.append(f"SKIP {self._skip}")
        if self._limit is not None:
            parts.append(f"LIMIT {self._limit}")
        query = "\n".join(part for part in parts if part)
        log.debug("[     ]  _: <QUERY BUILDER> built query:\n%s\n%r",
                  query, self._parameters)
        return query

    def get_parameters(self) -> t.Dict[str, t.Any]:
        """Get a copy of the bound parameters.

        Changing the returned dictionary does not affect the builder.
        """
        return dict(self._parameters)

    def to_query(self) -> Query:
        """Render the query together with a copy of its parameters."""
        return Query(self.build(), self.get_parameters())

    def clear(self) -> te.Self:
        """Remove all clauses and parameters.

        :return: this builder
        """
        log.debug("[     ]  _: <QUERY BUILDER> clear %r", self)
        self._reset()
        return self

    def subquery(
        self,
        configure: t.Callable[[QueryBuilder], t.Any],
    ) -> te.Self:
        """Nest a subquery configured by a callback.

        ``configure`` is called with a fresh :class:`QueryBuilder`. The
        result is rendered, wrapped in parentheses and added as one entry
        to the ``MATCH`` group. Its parameters are merged into this
        builder's parameters, overriding parameters of the same name.

        If ``configure`` raises, the exception propagates and this builder
        is left unchanged.

        :param configure: callable that populates the sub-builder. Its
            return value is ignored.

        :return: this builder

        Example::

            builder.subquery(
                lambda sub: sub.match("(p)-[:OWNS]->(c:Car)")
                               .return_("count(c) AS carCount")
            )
        """
        sub_builder = self.__class__()
        configure(sub_builder)
        sub_query = sub_builder.build()
        log.debug("[     ]  _: <QUERY BUILDER> subquery of %r", sub_builder)
        self._match_clauses.append(f"({sub_query})")
        self._parameters.update(sub_builder._parameters)
        return self

    def _combine(self, other: QueryBuilder, keyword: str) -> te.Self:
        current_query = self.build()
        other_query = other.build()
        other_parameters = other.get_parameters()
        log.debug("[     ]  _: <QUERY BUILDER> %s of %r and %r",
                  keyword, self, other)
        self._reset()
        self._match_clauses.append(
            f"{current_query}\n{keyword}\n{other_query}"
        )
        self._parameters.update(other_parameters)
        return self

    def union(self, other: QueryBuilder) -> te.Self:
        """Combine this query with another one using ``UNION``.

        Both queries are rendered as they are now. This builder is then
        cleared and holds only the combined statement. Parameters of this
        builder are discarded; the parameters of ``other`` are taken over.
        ``other`` itself is not modified.

        :param other: the query to append.

        :return: this builder
        """
        return self._combine(other, "UNION")

    def union_all(self, other: QueryBuilder) -> te.Self:
        """Combine this query with another one using ``UNION ALL``.

        Same as :meth:`union`, but duplicates are kept by the database.

        :param other: the query to append.

        :return: this builder
        """
        return self._combine(other, "UNION ALL")
