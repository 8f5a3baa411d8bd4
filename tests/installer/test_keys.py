import pytest
import sqlalchemy as sa
from orm_longid.errors import KeyResolutionError
from orm_longid.metadata import UniqueKey, UniqueKeysProvider, group_keys, resolve_key_column
from orm_longid.tables import ConfiguredTable


def key(column, *, pk=True, count=1, data_type="BIGINT", table="items", schema=None):
    return UniqueKey(
        schema=schema,
        table_name=table,
        column_name=column,
        is_primary_key=pk,
        column_count=count,
        data_type=data_type,
    )


ITEMS = ConfiguredTable(7, "items")


def test_primary_key_column_resolved():
    keys = group_keys([key("id")])
    assert resolve_key_column(ITEMS, keys) == "id"


def test_table_lookup_is_case_insensitive():
    keys = group_keys([key("id", table="Items")])
    assert resolve_key_column(ITEMS, keys) == "id"


def test_missing_constraint_reported():
    with pytest.raises(KeyResolutionError) as exc:
        resolve_key_column(ITEMS, {})
    assert str(exc.value) == "No key constraint found for items."


@pytest.mark.parametrize(
    "keys",
    [
        [key("id", data_type="VARCHAR(20)")],
        [key("a", count=2)],
        [key("code", pk=False)],
    ],
)
def test_ineligible_keys_rejected(keys):
    with pytest.raises(KeyResolutionError) as exc:
        resolve_key_column(ITEMS, group_keys(keys))
    assert "No key constraint with single BIGINT column found for items." == str(exc.value)


def test_unique_key_used_when_allowed():
    keys = group_keys([key("a", count=2), key("code", pk=False)])

    assert resolve_key_column(ITEMS, keys, use_unique_if_primary_key_not_match=True) == "code"


def test_primary_key_preferred_over_unique():
    keys = group_keys([key("code", pk=False), key("id")])

    assert resolve_key_column(ITEMS, keys, use_unique_if_primary_key_not_match=True) == "id"


def test_several_unique_keys_are_ambiguous():
    keys = group_keys([key("a", count=2), key("code", pk=False), key("alt", pk=False)])

    with pytest.raises(KeyResolutionError) as exc:
        resolve_key_column(ITEMS, keys, use_unique_if_primary_key_not_match=True)

    assert str(exc.value).startswith("Multiple key constraints")


def test_explicit_key_column_must_qualify():
    keys = group_keys([key("id"), key("code", pk=False)])

    table = ITEMS.with_key("CODE")
    assert resolve_key_column(table, keys, use_unique_if_primary_key_not_match=True) == "code"

    with pytest.raises(KeyResolutionError) as exc:
        resolve_key_column(ITEMS.with_key("other"), keys)
    assert str(exc.value).endswith("found for items.other.")


def test_schema_qualified_lookup():
    keys = group_keys([key("id", schema="sales")])

    assert resolve_key_column(ConfiguredTable(7, "items", schema="sales"), keys) == "id"
    with pytest.raises(KeyResolutionError):
        resolve_key_column(ITEMS, keys)


@pytest.fixture
def reflected_engine(engine):
    md = sa.MetaData()
    sa.Table(
        "catalogue",
        md,
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("entry_id", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("entry_id", name="uq_catalogue_entry"),
    )
    sa.Table(
        "pairs",
        md,
        sa.Column("a", sa.Integer, primary_key=True),
        sa.Column("b", sa.Integer, primary_key=True),
    )
    md.create_all(engine)
    return engine


def test_provider_reads_primary_and_unique_keys(reflected_engine):
    tables = [ConfiguredTable(1, "catalogue"), ConfiguredTable(2, "pairs")]

    keys = UniqueKeysProvider().unique_keys(reflected_engine, tables)

    by_table = group_keys(keys)
    catalogue = {(k.column_name, k.is_primary_key): k for k in by_table["catalogue"]}
    assert catalogue[("id", True)].data_type.startswith("VARCHAR")
    assert catalogue[("entry_id", False)].data_type == "BIGINT"
    assert by_table["pairs"] == [key("a", count=2, table="pairs")]

    assert resolve_key_column(tables[0], by_table, use_unique_if_primary_key_not_match=True) == "entry_id"


def test_provider_skips_missing_tables(engine, caplog):
    keys = UniqueKeysProvider().unique_keys(engine, [ConfiguredTable(1, "does_not_exist")])

    assert keys == []
    assert "does not exist" in caplog.text
