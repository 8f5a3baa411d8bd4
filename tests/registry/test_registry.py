import pytest
import sqlalchemy as sa
import sqlalchemy.orm as so
from orm_longid.errors import DuplicateTypeError
from orm_longid.registry import ModelDescriptor, TypeRegistry
from orm_longid.tables import ConfiguredTable, LongIdTableBase

from tests.models import Order, Customer, Untyped, CompositeWithKey, ORDER_TYPE, CUSTOMER_TYPE

Base = so.declarative_base()


class Invoice(LongIdTableBase, Base):
    __tablename__ = "invoices"
    __table_args__ = {"schema": "billing"}
    __longid_type__ = 0x0301

    invoice_id: so.Mapped[int] = so.mapped_column(sa.BigInteger, primary_key=True, autoincrement=False)


class OtherOrder(LongIdTableBase, Base):
    __tablename__ = "other_orders"
    __longid_type__ = ORDER_TYPE

    id: so.Mapped[int] = so.mapped_column(sa.BigInteger, primary_key=True, autoincrement=False)


def test_descriptor_from_model():
    desc = ModelDescriptor.from_model(Invoice)

    assert desc.type_id == 0x0301
    assert desc.table_name == "billing.invoices"
    assert desc.table == ConfiguredTable(0x0301, "invoices", schema="billing", key_column_name="invoice_id")
    assert desc.cls is Invoice


def test_descriptor_requires_longid_base():
    class Plain:
        pass

    with pytest.raises(TypeError):
        ModelDescriptor.from_model(Plain)  # type: ignore


def test_register_single_model():
    reg = TypeRegistry()
    reg.register_model(Order)

    models = reg.models()

    assert list(models) == [ORDER_TYPE]
    assert models[ORDER_TYPE].model_class is Order
    assert reg.type_for(Order) == ORDER_TYPE


def test_register_untyped_model_with_explicit_type():
    reg = TypeRegistry()
    reg.register_model(Untyped, type_id=0x0777)

    assert reg.registered_types() == {0x0777}
    assert reg.configured_tables() == [ConfiguredTable(0x0777, "untyped", key_column_name="id")]


def test_untyped_model_without_explicit_type_rejected():
    with pytest.raises(ValueError):
        TypeRegistry().register_model(Untyped)


def test_configured_tables_sorted_by_type():
    reg = TypeRegistry()
    reg.register_models([CompositeWithKey, Customer, Order])

    tables = reg.configured_tables()

    assert [t.type_id for t in tables] == [ORDER_TYPE, CUSTOMER_TYPE, 0x0103]
    assert tables[2].key_column_name == "entry_id"


def test_duplicate_type_rejected():
    reg = TypeRegistry()
    reg.register_model(Order)

    reg.register_model(Order)
    with pytest.raises(DuplicateTypeError) as exc:
        reg.register_model(OtherOrder)

    assert exc.value.type_id == ORDER_TYPE
    assert reg.models()[ORDER_TYPE].model_class is Order


def test_type_for_unregistered_model():
    with pytest.raises(KeyError):
        TypeRegistry().type_for(Order)


def test_discover_models():
    reg = TypeRegistry()
    reg.discover_models("tests.discoverable")

    assert reg.registered_types() == {0x0201, 0x0202}
    assert [t.table_name for t in reg.configured_tables()] == ["products", "suppliers"]
    assert reg.configured_tables()[1].key_column_name == "supplier_id"
