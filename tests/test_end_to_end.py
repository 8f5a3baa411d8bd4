from concurrent.futures import ThreadPoolExecutor

from orm_longid import DefaultHelper, LongIdAllocator, PeriodicFlusher, TypeRegistry
from orm_longid.ids import decode, encode

from tests.models import Order, Customer, ORDER_TYPE, CUSTOMER_TYPE


def registered_tables():
    reg = TypeRegistry()
    reg.register_models([Order, Customer])
    return reg.configured_tables()


def test_install_allocate_flush_reload(engine, session):
    session.add(Order(id=encode(ORDER_TYPE, 1, 0, 41)))
    session.commit()

    helper = DefaultHelper(engine)
    helper.install(1, 0, False, *registered_tables())

    allocator = helper.get_allocator()
    assert helper.get_allocator() is allocator

    order_id = allocator.create(ORDER_TYPE)
    customer_id = allocator.create(CUSTOMER_TYPE)
    assert order_id == encode(ORDER_TYPE, 1, 0, 42)
    assert customer_id == encode(CUSTOMER_TYPE, 1, 0, 1)

    session.add(Order(id=order_id))
    session.add(Customer(customer_id=customer_id, name="first"))
    session.commit()

    allocator.flush_to_storage()

    reloaded = LongIdAllocator(helper.get_storage())
    assert reloaded.create(ORDER_TYPE) == encode(ORDER_TYPE, 1, 0, 43)
    assert reloaded.create(CUSTOMER_TYPE) == encode(CUSTOMER_TYPE, 1, 0, 2)


def test_bootstrap_recovers_after_lost_flush(engine, session):
    helper = DefaultHelper(engine)
    helper.install(0, 0, False, *registered_tables())

    allocator = LongIdAllocator(helper.get_storage())
    issued = [allocator.create(ORDER_TYPE) for _ in range(5)]
    session.add_all([Order(id=i) for i in issued])
    session.commit()
    # process dies here: the issued values were never flushed

    storage = helper.get_storage()
    assert decode(LongIdAllocator(storage).last_value(ORDER_TYPE)).sequence == 0

    storage.load(bootstrap_from_real_tables=True)
    recovered = LongIdAllocator(storage)

    assert recovered.create(ORDER_TYPE) == encode(ORDER_TYPE, 0, 0, 6)
    assert recovered.create(CUSTOMER_TYPE) == encode(CUSTOMER_TYPE, 0, 0, 1)


def test_concurrent_allocation_with_periodic_flush(engine):
    helper = DefaultHelper(engine)
    helper.install(0, 0, False, *registered_tables())
    allocator = helper.get_allocator()

    with PeriodicFlusher(allocator, interval_seconds=0.01):
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(allocator.create, [ORDER_TYPE] * 200))

    assert len(set(results)) == 200
    reloaded = LongIdAllocator(helper.get_storage())
    assert reloaded.last_value(ORDER_TYPE) == encode(ORDER_TYPE, 0, 0, 200)
