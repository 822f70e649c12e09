import pytest

from higo import statement


def test_simple_select():
    sql, args = statement.select("a", "b").from_("t").to_sql()
    assert sql == "SELECT a, b FROM t"
    assert args == []


def test_select_where_string_with_args():
    sql, args = statement.select("a").from_("t").where("a > ?", 1).to_sql()
    assert " WHERE a > ?" in sql
    assert args == [1]


def test_select_where_mapping_sorted_by_key():
    sql, args = statement.select("*").from_("t").where({"b": 2, "a": 1}).to_sql()
    assert args == [1, 2]
    assert sql.index("a = ?") < sql.index("b = ?")
    assert " AND " in sql


def test_where_mapping_null_and_list():
    sql, args = statement.select("*").from_("t").where({"x": None, "y": [1, 2]}).to_sql()
    assert "x IS NULL" in sql
    assert sql.count("?") == 2
    assert args == [1, 2]


def test_empty_where_is_ignored():
    base = statement.select("a").from_("t")
    assert base.where("").to_sql() == base.to_sql()


def test_builder_is_immutable():
    base = statement.select("a").from_("t")
    before = base.to_sql()
    base.where("x = ?", 3).limit(1)
    assert base.to_sql() == before


def test_select_without_columns_fails():
    with pytest.raises(ValueError):
        statement.select().from_("t").to_sql()


def test_limit_and_offset():
    sql, _ = statement.select("a").from_("t").limit(10).offset(5).to_sql()
    assert sql.endswith("LIMIT 10 OFFSET 5")


def test_negative_limit_fails():
    with pytest.raises(ValueError):
        statement.select("a").limit(-1)


def test_clause_order_and_argument_order():
    builder = (
        statement.select("a", "count(*)")
        .from_("t")
        .order_by("a")
        .having("count(*) > ?", 2)
        .group_by("a")
        .where("a <> ?", 1)
        .join("u ON u.id = t.id AND u.k = ?", 0)
        .limit(3)
    )
    sql, args = builder.to_sql()
    positions = [sql.index(word) for word in ("FROM", "JOIN", "WHERE", "GROUP BY", "HAVING", "ORDER BY", "LIMIT")]
    assert positions == sorted(positions)
    assert args == [0, 1, 2]


def test_insert_keeps_column_order():
    sql, args = statement.insert("users").set("name", "bob").set("age", 3).to_sql()
    assert sql.startswith("INSERT INTO users")
    assert sql.index("name") < sql.index("age")
    assert sql.count("?") == 2
    assert args == ["bob", 3]


def test_update_sets_then_where():
    sql, args = statement.update("users").set("b", 2).set("a", 1).where("id", 7).to_sql()
    assert sql.startswith("UPDATE users SET ")
    assert " WHERE " in sql
    assert sql.index("a = ?") < sql.index("b = ?") < sql.index("id = ?")
    assert args == [1, 2, 7]


def test_update_last_set_wins():
    _, args = statement.update("users").set("a", 1).set("a", 9).where("id", 4).to_sql()
    assert args == [9, 4]


def test_update_without_set_fails():
    with pytest.raises(ValueError):
        statement.update("users").where("id", 1).to_sql()


def test_delete_with_where():
    sql, args = statement.delete("users").where("id", 1).to_sql()
    assert sql == "DELETE FROM users WHERE id = ?"
    assert args == [1]


def test_delete_without_table_fails():
    with pytest.raises(ValueError):
        statement.delete("").where("id", 1).to_sql()


def test_insert_without_table_fails():
    with pytest.raises(ValueError):
        statement.insert("").set("a", 1).to_sql()


def test_query_select_matches_module_select():
    assert statement.query().select("a").from_("t").to_sql() == statement.select("a").from_("t").to_sql()


def test_bare_query_has_no_columns():
    with pytest.raises(ValueError):
        statement.query().to_sql()


def test_invalid_predicate_type():
    with pytest.raises(TypeError):
        statement.select("a").where(42)