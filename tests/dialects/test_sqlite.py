from flushorm.dialects import SQLiteDialect


def test_sqlite_identifier_quoting():
    dialect = SQLiteDialect()
    assert dialect.quote_identifier("table") == '"table"'
    assert dialect.quote_identifier('bad"name') == '"bad""name"'


def test_sqlite_generated_key():
    dialect = SQLiteDialect()
    assert dialect.render_generated_key("id") == '"id" INTEGER PRIMARY KEY AUTOINCREMENT'
    assert dialect.parameter_placeholder(2) == "?"


def test_sqlite_column_definition():
    dialect = SQLiteDialect()
    rendered = dialect.render_column_definition("name", "TEXT", nullable=False)
    assert rendered == '"name" TEXT NOT NULL'


def test_sqlite_does_not_split_dotted_table_names():
    assert SQLiteDialect().format_table("main.users") == '"main.users"'
