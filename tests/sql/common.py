"""Helpers for tests of the SQL query engine."""

import unittest

import sqlalchemy as sa

from tests.common import FACTS


def create_table(engine, md, desc):
    """Create a table according to description `desc`. The description
    contains keys:
    * `name` – table name
    * `columns` – list of column names
    * `types` – list of column types. If not specified, then `string` is
      assumed
    * `data` – list of dictionaries representing table rows

    Returns a SQLAlchemy `Table` object with loaded data.
    """

    TYPES = {
        "integer": sa.Integer,
        "string": sa.String,
    }
    table = sa.Table(desc["name"], md, sa.Column("id", sa.Integer, primary_key=True))

    types = desc.get("types") or ["string"] * len(desc["columns"])

    for name, type_ in zip(desc["columns"], types):
        table.append_column(sa.Column(name, TYPES[type_]))

    with engine.begin() as conn:
        md.create_all(conn)
        if desc["data"]:
            conn.execute(table.insert(), list(desc["data"]))

    return table


class SQLTestCase(unittest.TestCase):
    """Test case with an in-memory database holding the sample facts."""

    def setUp(self):
        self.engine = sa.create_engine("sqlite://")
        self.metadata = sa.MetaData()
        self.facts = create_table(
            self.engine,
            self.metadata,
            {
                "name": "facts",
                "columns": ["region", "product", "revenue", "units"],
                "types": ["string", "string", "integer", "integer"],
                "data": FACTS,
            },
        )

    def tearDown(self):
        self.engine.dispose()
